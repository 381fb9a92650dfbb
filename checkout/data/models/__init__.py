#import all models so SQLAlchemy registers them in Base.metadata

from checkout.data.models.booking import BookingModel
from checkout.data.models.cart_line import CartLineModel
from checkout.data.models.stock import StockModel

__all__ = ["BookingModel", "CartLineModel", "StockModel"]
