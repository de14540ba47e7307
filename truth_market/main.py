"""Main script for running the truth marketplace from the terminal."""

import asyncio
import time

from dotenv import load_dotenv

from .domain.errors import MarketError
from .infrastructure.dependencies import ServiceContainer


async def main():
    """Run an interactive purchase session."""
    print("Truth Marketplace - buy verified claims, earn badges")
    print("----------------------------------------------------")

    load_dotenv()
    container = ServiceContainer()
    await container.startup()
    settlement = container.get("settlement_service")

    buyer = input("\nYour account id (e.g. 0.0.1001): ").strip()

    try:
        while True:
            # Get claim from user
            claim = input("\nEnter a claim to buy (or 'quit' to exit): ")
            if claim.lower() in ('quit', 'exit', 'q'):
                break

            print("\nSettling purchase...")
            try:
                result = await settlement.purchase_claim(claim, buyer, f"cli_tx_{int(time.time() * 1000)}")

                # Print results
                print(f"\n{result.message}")
                if not result.success:
                    verification = result.verification
                    print(f"Verdict: {verification.verdict.value} ({verification.confidence}%)")
                    print(f"Reasoning: {verification.reasoning}")
                    continue

                print(f"Sale: {result.sale.id} (seller {result.sale.seller})")
                print(f"Purchases: {result.buyer.purchase_count}, badges: {result.buyer.badges_earned}")
                if result.badge.minted:
                    badge = result.badge.badge
                    print(f"Badge: {badge.tier.value} serial {badge.serial_number}")
                else:
                    print(f"Next badge in {result.badge.next_in} purchase(s)")

                for warning in result.warnings:
                    print(f"Warning: {warning}")

            except MarketError as e:
                print(f"\nPurchase failed: {e}")

    finally:
        # Clean up
        await container.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
