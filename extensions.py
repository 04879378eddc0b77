from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from config import RATELIMIT_STORAGE_URI

# Bound to the app in create_app(). No default limits: only the public
# scan endpoint is throttled, embedded admin traffic is not.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri=RATELIMIT_STORAGE_URI
)
