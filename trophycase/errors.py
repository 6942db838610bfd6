# trophycase/errors.py
from typing import Optional


class TrophyCaseError(Exception):
  """Base for every error the service surfaces to a caller."""
  status_code = 500
  title = "Internal Error"
  retryable = False

  def __init__(self, message: str = ""):
    super().__init__(message or self.title)
    self.message = message or self.title


class ConfigurationError(TrophyCaseError):
  title = "Configuration Error"


class ValidationError(TrophyCaseError):
  status_code = 400
  title = "Bad Request"


# ----------------------------
# Upstream (GitHub GraphQL)
# ----------------------------
class UpstreamError(TrophyCaseError):
  status_code = 502
  title = "Upstream Error"


class UpstreamUnauthorized(UpstreamError):
  status_code = 401
  title = "Unauthorized"


class UpstreamNotFound(UpstreamError):
  status_code = 404
  title = "Not Found"


class UpstreamRateLimited(UpstreamError):
  status_code = 429
  title = "Rate Limit Exceeded"
  retryable = True

  def __init__(self, message: str = "", retry_after: Optional[float] = None):
    super().__init__(message)
    self.retry_after = retry_after


class UpstreamTransient(UpstreamError):
  status_code = 503
  title = "Service Unavailable"
  retryable = True


class UpstreamMalformed(UpstreamError):
  status_code = 502
  title = "Bad Gateway"


class RenderFailure(TrophyCaseError):
  title = "Render Failure"
