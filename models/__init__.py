from models.user import User
from models.category import Category
from models.product import Product, ProductCondition, ProductStatus
from models.cart import CartItem, WishlistItem
from models.order import Order, OrderStatus, PaymentStatus
from models.review import Review
