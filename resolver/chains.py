from enum import Enum
from pydantic import BaseModel, ConfigDict, model_validator

from core.exceptions import NetworkNotSupportedException


class Chain(str, Enum):
    """
    Networks with a well-known RPC endpoint.
    """
    ETHEREUM = "ethereum"
    SEPOLIA = "sepolia"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"
    BASE = "base"
    POLYGON = "polygon"
    AVALANCHE = "avalanche"
    BNB = "bnb"
    GNOSIS = "gnosis"
    LINEA = "linea"
    SCROLL = "scroll"
    BLAST = "blast"
    MANTLE = "mantle"
    CELO = "celo"
    FANTOM = "fantom"
    ZKSYNC = "zksync"

    @property
    def info(self) -> "ChainInfo":
        return CHAINS[self]

    @classmethod
    def from_chain_id(cls, chain_id: int) -> "Chain":
        """
        Map an EIP-155 chain id to a known chain.

        Parameters
        ----------
        chain_id : int
            Chain id reported by the node

        Returns
        -------
        Chain
            Matching chain

        Raises
        ------
        NetworkNotSupportedException
            If no known chain has this id
        """
        for chain, info in CHAINS.items():
            if info.chain_id == chain_id:
                return chain
        raise NetworkNotSupportedException(f"Unknown chain id {chain_id}")


class ChainInfo(BaseModel):
    """
    Static description of a network.

    Attributes
    ----------
    chain_id : int
        EIP-155 chain id
    default_rpc_url : str
        Public RPC endpoint
    ankr_path : str | None
        Path segment on the Ankr RPC gateway
    """
    chain_id: int
    default_rpc_url: str
    ankr_path: str | None = None

    model_config = ConfigDict(frozen=True)


CHAINS: dict[Chain, ChainInfo] = {
    Chain.ETHEREUM: ChainInfo(chain_id=1, default_rpc_url="https://ethereum-rpc.publicnode.com", ankr_path="eth"),
    Chain.SEPOLIA: ChainInfo(chain_id=11155111, default_rpc_url="https://ethereum-sepolia-rpc.publicnode.com", ankr_path="eth_sepolia"),
    Chain.ARBITRUM: ChainInfo(chain_id=42161, default_rpc_url="https://arbitrum-one-rpc.publicnode.com", ankr_path="arbitrum"),
    Chain.OPTIMISM: ChainInfo(chain_id=10, default_rpc_url="https://optimism-rpc.publicnode.com", ankr_path="optimism"),
    Chain.BASE: ChainInfo(chain_id=8453, default_rpc_url="https://base-rpc.publicnode.com", ankr_path="base"),
    Chain.POLYGON: ChainInfo(chain_id=137, default_rpc_url="https://polygon-bor-rpc.publicnode.com", ankr_path="polygon"),
    Chain.AVALANCHE: ChainInfo(chain_id=43114, default_rpc_url="https://avalanche-c-chain-rpc.publicnode.com", ankr_path="avalanche"),
    Chain.BNB: ChainInfo(chain_id=56, default_rpc_url="https://bsc-rpc.publicnode.com", ankr_path="bsc"),
    Chain.GNOSIS: ChainInfo(chain_id=100, default_rpc_url="https://gnosis-rpc.publicnode.com", ankr_path="gnosis"),
    Chain.LINEA: ChainInfo(chain_id=59144, default_rpc_url="https://rpc.linea.build", ankr_path="linea"),
    Chain.SCROLL: ChainInfo(chain_id=534352, default_rpc_url="https://rpc.scroll.io", ankr_path="scroll"),
    Chain.BLAST: ChainInfo(chain_id=81457, default_rpc_url="https://rpc.blast.io", ankr_path="blast"),
    Chain.MANTLE: ChainInfo(chain_id=5000, default_rpc_url="https://rpc.mantle.xyz", ankr_path="mantle"),
    Chain.CELO: ChainInfo(chain_id=42220, default_rpc_url="https://forno.celo.org", ankr_path="celo"),
    Chain.FANTOM: ChainInfo(chain_id=250, default_rpc_url="https://rpcapi.fantom.network", ankr_path="fantom"),
    Chain.ZKSYNC: ChainInfo(chain_id=324, default_rpc_url="https://mainnet.era.zksync.io", ankr_path="zksync_era"),
}


class ChainOrRpc(BaseModel):
    """
    Network addressed either by name or by an explicit RPC URL.

    Exactly one of ``chain`` and ``rpc_url`` is set.

    Attributes
    ----------
    chain : Chain | None
        Known network
    rpc_url : str | None
        Raw JSON-RPC endpoint
    """
    chain: Chain | None = None
    rpc_url: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_exactly_one(self) -> "ChainOrRpc":
        if (self.chain is None) == (self.rpc_url is None):
            raise ValueError("Exactly one of chain or rpc_url must be set")
        return self

    @classmethod
    def parse(cls, value: str) -> "ChainOrRpc":
        """
        Build from a chain name or an http(s) URL.

        Parameters
        ----------
        value : str
            Chain name (case-insensitive) or RPC URL

        Returns
        -------
        ChainOrRpc
            Parsed value

        Raises
        ------
        NetworkNotSupportedException
            If the value is neither a URL nor a known chain name
        """
        value = value.strip()
        if value.startswith(("http://", "https://")):
            return cls(rpc_url=value)
        try:
            return cls(chain=Chain(value.lower()))
        except ValueError:
            raise NetworkNotSupportedException(f"Network {value} is not supported")

    def __str__(self) -> str:
        return self.chain.value if self.chain is not None else self.rpc_url
