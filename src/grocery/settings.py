"""Business constants and environment-driven settings."""

import os

# Checkout
FREE_DELIVERY_THRESHOLD = 500
DELIVERY_CHARGE = 30
ESTIMATED_DELIVERY_MINUTES = 20
ORDER_NUMBER_PREFIX = "KM"
DELIVERY_OTP_LENGTH = 6

# Loyalty: one point per ₹10 spent, ten points redeem for ₹1
RUPEES_PER_POINT_EARNED = 10
POINTS_PER_RUPEE_REDEEMED = 10

# Delivery partners
AGENT_FEE_PER_DELIVERY = 30
NEARBY_AGENT_RADIUS_METERS = 4000

# Catalogue
DEFAULT_LOW_STOCK_THRESHOLD = 10

# Live tracking: recent messages kept by the in-process hub
TRACKING_HISTORY_SIZE = 200

# HTTP
JWT_SECRET = os.getenv("JWT_SECRET", "krishna-marketing-dev-jwt-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "10080"))
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
