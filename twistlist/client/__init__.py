from .api_client import TwistListClient, APIError, SessionExpiredError
from .task_cache import TaskCache
