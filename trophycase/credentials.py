# trophycase/credentials.py
import asyncio
import logging
import threading
from typing import Iterable, List, Optional

from trophycase.errors import ConfigurationError, ValidationError

log = logging.getLogger("credentials")
if not log.handlers:
  h = logging.StreamHandler()
  h.setFormatter(logging.Formatter("[CRED] %(levelname)s: %(message)s"))
  log.addHandler(h)
  log.setLevel(logging.INFO)


class Credential:
  def __init__(self, token: str):
    self.token = token
    self._owner: Optional[str] = None

  @property
  def owner(self) -> Optional[str]:
    return self._owner

  def bind_owner(self, login: str) -> None:
    if self._owner is not None and self._owner != login:
      raise ConfigurationError("credential owner already resolved")
    self._owner = login

  def __repr__(self) -> str:
    return f"Credential(token='{self.token[:4]}…', owner={self._owner!r})"


class CredentialPool:
  def __init__(self, tokens: Iterable[Optional[str]]):
    self._creds: List[Credential] = [Credential(t.strip()) for t in tokens if t and t.strip()]
    if not self._creds:
      raise ConfigurationError(
          "No GitHub token found. Set GITHUB_TOKEN1/GITHUB_TOKEN2 (or GITHUB_TOKEN)."
      )
    self._cursor = 0
    self._lock = threading.Lock()
    self._resolving: Optional[asyncio.Task] = None

  def __len__(self) -> int:
    return len(self._creds)

  @property
  def single_token_mode(self) -> bool:
    return len(self._creds) == 1

  @property
  def owner(self) -> Optional[str]:
    return self._creds[0].owner if self.single_token_mode else None

  def acquire(self) -> Credential:
    with self._lock:
      cred = self._creds[self._cursor]
      self._cursor = (self._cursor + 1) % len(self._creds)
    return cred

  async def resolve_owner(self, client) -> str:
    """
    Single-token mode: login of the token owner, looked up once.
    Concurrent callers share one lookup; a failed lookup is not remembered.
    """
    if not self.single_token_mode:
      raise ValidationError('"username" is a required query parameter')
    cred = self._creds[0]
    if cred.owner is not None:
      return cred.owner

    if self._resolving is None:
      self._resolving = asyncio.get_running_loop().create_task(self._resolve(client, cred))
    task = self._resolving
    return await asyncio.shield(task)

  async def _resolve(self, client, cred: Credential) -> str:
    try:
      login = await client.fetch_viewer(cred)
      cred.bind_owner(login)
      log.info("single token mode enabled for username='%s'", login)
      return login
    except Exception as e:
      log.warning("failed to resolve username from single token: %s", e)
      raise
    finally:
      self._resolving = None
