from core.errors import DataPlatformError, AccessForbiddenError, UnauthenticatedError  # noqa: F401
from core.filter_builder import search_filter, name_filter, normalize_filter  # noqa: F401
