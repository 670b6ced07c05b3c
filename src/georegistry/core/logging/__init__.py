# georegistry/core/logging/
# ├─ builder.py      # make_dict_config(settings) + setup_logging(settings) + queue mode
# ├─ formatters.py   # JsonFormatter, ColorFormatter
# ├─ filters.py      # RequestIdFilter (+ contextvar helpers), RedactFilter
# ├─ handlers.py     # handler dicts for dictConfig (console / rotating files)
# └─ middleware.py   # RequestIDMiddleware

from .builder import setup_logging, make_dict_config, stop_queue_logging
from .filters import set_request_id, get_request_id, RequestIdFilter, RedactFilter
from .middleware import RequestIDMiddleware

__all__ = [
    "setup_logging",
    "make_dict_config",
    "stop_queue_logging",
    "set_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RedactFilter",
    "RequestIDMiddleware",
]
