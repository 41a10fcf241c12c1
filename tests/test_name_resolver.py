import pytest

from core.exceptions import EnsResolutionException
from resolver.chains import Chain, ChainOrRpc
from resolver.entities import NameOrAddress

from conftest import ALICE, FakeEns, FakeWeb3


class TestNameResolver:
    """
    Tests for ENS resolution on the canonical chain.
    """

    @pytest.mark.asyncio
    async def test_address_returned_without_lookup(self, name_resolver, patched_clients, fake_web3):
        address = await name_resolver.to_address(NameOrAddress(value=ALICE.lower()))

        assert address == ALICE
        assert fake_web3.ens.calls == []
        patched_clients.assert_not_called()

    @pytest.mark.asyncio
    async def test_name_resolved_on_canonical_chain(self, name_resolver, patched_clients):
        """
        The lookup goes to the configured ENS chain, whatever chain the
        surrounding query targets.

        Parameters
        ----------
        name_resolver : NameResolver
            Resolver under test
        patched_clients : MagicMock
            Patched ``Web3Service.get_client``
        """
        address = await name_resolver.to_address(NameOrAddress(value="alice.eth"))

        assert address == ALICE
        patched_clients.assert_called_once_with(ChainOrRpc(chain=Chain.ETHEREUM))

    @pytest.mark.asyncio
    async def test_unknown_name_fails(self, name_resolver, patched_clients):
        with pytest.raises(EnsResolutionException, match="nobody.eth"):
            await name_resolver.to_address(NameOrAddress(value="nobody.eth"))

    @pytest.mark.asyncio
    async def test_unreachable_canonical_chain_fails(self, name_resolver, web3_service, monkeypatch):
        unreachable = FakeWeb3(ens=FakeEns(reachable=False))
        monkeypatch.setattr(web3_service, "get_client", lambda chain: unreachable)

        with pytest.raises(EnsResolutionException) as exc_info:
            await name_resolver.to_address(NameOrAddress(value="alice.eth"))

        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_malformed_name_is_a_resolution_error(self, name_resolver, web3_service, monkeypatch):
        broken = FakeWeb3(ens=FakeEns(error=ValueError("invalid name")))
        monkeypatch.setattr(web3_service, "get_client", lambda chain: broken)

        with pytest.raises(EnsResolutionException):
            await name_resolver.to_address(NameOrAddress(value="bad..eth"))

    @pytest.mark.asyncio
    async def test_programming_error_is_not_masked(self, name_resolver, web3_service, monkeypatch):
        broken = FakeWeb3(ens=FakeEns(error=TypeError("unexpected argument")))
        monkeypatch.setattr(web3_service, "get_client", lambda chain: broken)

        with pytest.raises(TypeError, match="unexpected argument"):
            await name_resolver.to_address(NameOrAddress(value="alice.eth"))
