"""
Basic usage example for starkshield
"""

from starkshield import (
    AccountIdentity,
    CalldataIntegrityGuard,
    Call,
    get_network_config,
    normalize,
    same_address,
)


def main():
    network = get_network_config("sepolia")

    print("=== starkshield Demo ===\n")

    # 1. Shielded identity (offline)
    print("1. Generating shielded identity...")
    alice = AccountIdentity.generate()
    public_key = alice.public_key.to_hex()
    print(f"   Public key: {public_key[:18]}...")
    print(f"   {alice!r}")

    # 2. Address canonicalization
    print("\n2. Canonicalizing addresses...")
    wallet_reported = "0x123abc"
    canonical = normalize(wallet_reported)
    print(f"   {wallet_reported} -> {canonical}")
    print(f"   Same account: {same_address(wallet_reported, canonical)}")

    # 3. Approval spender repair
    print("\n3. Checking an approval call...")
    guard = CalldataIntegrityGuard(network.contract)
    truncated = str(network.contract.to_int() >> 8)
    approval = Call(network.token, "approve", [truncated, str(10**18), "0"])
    print(f"   Spender mismatch: {guard.inspect(approval)}")
    repaired = guard.verify(approval)
    print(f"   Repaired spender: {repaired.calldata[0][:16]}...")
    print(f"   Spender mismatch: {guard.inspect(repaired)}")

    print("\n=== Demo Complete ===")
    print("\nNote: This demo runs offline.")
    print(
        "For chain submission, build a ShieldedAccountClient with a proof builder, "
        "starkshield.starknet_client.StarknetBackend and a ledger query."
    )


if __name__ == "__main__":
    main()
