import asyncio

import pytest

from conftest import ScriptedClient
from trophycase.credentials import CredentialPool
from trophycase.errors import ConfigurationError, UpstreamUnauthorized, ValidationError


def test_no_tokens_is_a_configuration_error():
  with pytest.raises(ConfigurationError):
    CredentialPool([])
  with pytest.raises(ConfigurationError):
    CredentialPool([None, "", "   "])


def test_two_tokens_rotate():
  pool = CredentialPool(["tok-a", None, "tok-b"])
  assert len(pool) == 2
  assert not pool.single_token_mode
  seen = [pool.acquire().token for _ in range(4)]
  assert seen == ["tok-a", "tok-b", "tok-a", "tok-b"]


def test_single_token_always_returned():
  pool = CredentialPool([" only "])
  assert pool.single_token_mode
  assert {pool.acquire().token for _ in range(3)} == {"only"}


def test_repr_masks_token():
  pool = CredentialPool(["ghp_secretsecret"])
  assert "secretsecret" not in repr(pool.acquire())


@pytest.mark.asyncio
async def test_owner_resolved_once_for_concurrent_callers():
  pool = CredentialPool(["tok"])
  client = ScriptedClient(viewer="octocat")

  logins = await asyncio.gather(*[pool.resolve_owner(client) for _ in range(5)])
  assert logins == ["octocat"] * 5
  assert await pool.resolve_owner(client) == "octocat"
  assert client.viewer_calls == 1
  assert pool.owner == "octocat"
  assert pool.acquire().owner == "octocat"


@pytest.mark.asyncio
async def test_failed_owner_lookup_surfaces_and_is_not_remembered():
  pool = CredentialPool(["tok"])
  client = ScriptedClient(viewer=UpstreamUnauthorized("bad token"))

  with pytest.raises(UpstreamUnauthorized):
    await pool.resolve_owner(client)
  assert pool.owner is None

  client.viewer = "octocat"
  assert await pool.resolve_owner(client) == "octocat"
  assert client.viewer_calls == 2


@pytest.mark.asyncio
async def test_owner_lookup_needs_single_token_mode():
  pool = CredentialPool(["a", "b"])
  with pytest.raises(ValidationError):
    await pool.resolve_owner(ScriptedClient())
