#!/usr/bin/env python3
"""Command-line interface for the Checkout connector.

Amount conversions run offline. Payment and customer lookups read credentials
and the environment from ``CKO_*`` variables (see :mod:`checkout_connector.config`).

Usage:
    checkout-connector amount encode USD 20.00
    checkout-connector amount decode KWD 1500
    checkout-connector payment get pay_mbabizu24mvu3mela5njyhpit4
    checkout-connector payment actions pay_mbabizu24mvu3mela5njyhpit4
    checkout-connector customer get someone@example.com
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional

from .amount import decode, encode
from .client import CheckoutClient
from .currency import Currency
from .errors import CheckoutError
from .models import GetCustomerDetailsRequest, GetPaymentActionsRequest, GetPaymentDetailsRequest

logger = logging.getLogger(__name__)


def parse_currency(code: str) -> Currency:
    """Parse a three-letter currency code for argparse."""
    try:
        return Currency(code.upper())
    except ValueError:
        raise argparse.ArgumentTypeError(f"Unknown currency: {code}")


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


async def fetch_async(command: str, action: str, identifier: str) -> Any:
    """Run one lookup against the API and return its JSON-ready result."""
    async with CheckoutClient.from_env() as client:
        if command == "payment" and action == "get":
            details = await client.get_payment_details(GetPaymentDetailsRequest(payment_id=identifier))
            return details.to_wire()
        if command == "payment" and action == "actions":
            actions = await client.get_payment_actions(GetPaymentActionsRequest(payment_id=identifier))
            return [a.to_wire() for a in actions]
        customer = await client.get_customer_details(GetCustomerDetailsRequest(id_or_email=identifier))
        return customer.to_wire()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="checkout-connector",
        description="Checkout payment gateway tools.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    amount_parser = subparsers.add_parser("amount", help="Convert between decimal and minor units")
    amount_actions = amount_parser.add_subparsers(dest="action")
    encode_parser = amount_actions.add_parser("encode", help="Decimal value to minor units")
    encode_parser.add_argument("currency", type=parse_currency)
    encode_parser.add_argument("value", help="Decimal value, e.g. 20.00")
    decode_parser = amount_actions.add_parser("decode", help="Minor units to decimal value")
    decode_parser.add_argument("currency", type=parse_currency)
    decode_parser.add_argument("minor", type=int, help="Amount in minor units")

    payment_parser = subparsers.add_parser("payment", help="Look up a payment")
    payment_actions = payment_parser.add_subparsers(dest="action")
    payment_actions.add_parser("get", help="Payment details").add_argument("id")
    payment_actions.add_parser("actions", help="Payment actions, latest first").add_argument("id")

    customer_parser = subparsers.add_parser("customer", help="Look up a customer")
    customer_actions = customer_parser.add_subparsers(dest="action")
    customer_actions.add_parser("get", help="Customer details").add_argument(
        "id", metavar="ID_OR_EMAIL"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Optional list of command-line arguments (for testing).

    Returns:
        Exit code: 0 on success, 1 on a failed operation, 2 on bad usage.
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if not parsed_args.command or not parsed_args.action:
        parser.print_help(sys.stderr)
        return 2

    try:
        if parsed_args.command == "amount":
            currency = parsed_args.currency
            if parsed_args.action == "encode":
                minor = encode(currency, parsed_args.value)
                _emit({"currency": currency.value, "amount": int(minor)})
            else:
                value = decode(currency, parsed_args.minor)
                _emit({"currency": currency.value, "value": str(value)})
            return 0

        _emit(asyncio.run(fetch_async(parsed_args.command, parsed_args.action, parsed_args.id)))
        return 0
    except CheckoutError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
