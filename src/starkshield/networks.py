"""
Network presets for shielded accounts

Each preset pins the shielded ledger contract, the public token it wraps
and that token's decimals.
"""

from dataclasses import dataclass

from .address import CanonicalAddress, normalize


@dataclass(frozen=True)
class NetworkConfig:
    """Deployment a client talks to"""

    name: str
    chain_id: str
    shielded_contract: str
    token_address: str
    token_symbol: str
    token_decimals: int
    explorer_url: str

    @property
    def contract(self) -> CanonicalAddress:
        return normalize(self.shielded_contract)

    @property
    def token(self) -> CanonicalAddress:
        return normalize(self.token_address)

    def transaction_url(self, transaction_id: str) -> str:
        return f"{self.explorer_url}/tx/{transaction_id}"


SEPOLIA = NetworkConfig(
    name="sepolia",
    chain_id="SN_SEPOLIA",
    # STRK wrapper, 1:1 rate
    shielded_contract="0x00b4cca30f0f641e01140c1c388f55641f1c3fe5515484e622b6cb91d8cee585",
    token_address="0x04718f5a0fc34cc1af16a1cdee98ffb20c31f5cd61d6ab07201858f4287c938d",
    token_symbol="STRK",
    token_decimals=18,
    explorer_url="https://sepolia.starkscan.co",
)

MAINNET = NetworkConfig(
    name="mainnet",
    chain_id="SN_MAIN",
    shielded_contract="0x72098b84989a45cc00697431dfba300f1f5d144ae916e98287418af4e548d96",
    # USDC, not STRK
    token_address="0x053c91253bc9682c04929ca02ed00b3e423f6710d2ee7e0d5ebb06f3ecf368a8",
    token_symbol="USDC",
    token_decimals=6,
    explorer_url="https://starkscan.co",
)

NETWORKS = {
    "sepolia": SEPOLIA,
    "mainnet": MAINNET,
}


def get_network_config(network: str = "mainnet") -> NetworkConfig:
    """
    Get the preset for a network name

    Args:
        network: "sepolia" or "mainnet" (case-insensitive)

    Returns:
        Network preset

    Raises:
        ValueError: If the network is not recognized
    """
    key = network.lower()
    if key in NETWORKS:
        return NETWORKS[key]
    raise ValueError(
        f"Unknown network: {network}. Use one of: {list(NETWORKS.keys())}"
    )
