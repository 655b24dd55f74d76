"""Acid Ledger CLI — thin driver over LedgerService.

Commands:
  acid-ledger demo [--inject-fault]     commit, insufficient funds, concurrent pair
  acid-ledger transfer FROM TO AMOUNT   one transfer against the configured store
  acid-ledger batch FILE                JSON array of {from, to, amount}, run concurrently
  acid-ledger balance NAME              one account balance
  acid-ledger balances                  all balances and their total

Every command prints JSON. Exit code 0 on success, 1 on rollback, not-found or bad input.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError as SchemaValidationError

from acid_ledger.config import Settings, get_settings
from acid_ledger.core.domain_types import ConcurrencyStrategy, FaultPoint
from acid_ledger.core.errors import LedgerError
from acid_ledger.core.fault_injection import FaultInjector
from acid_ledger.infrastructure.observability import setup_logging
from acid_ledger.schemas.transfer import BalanceReport, TransferBatch
from acid_ledger.services.ledger_service import LedgerService, build_ledger_service


def _emit(payload: dict) -> None:
    print(json.dumps(payload, default=str))


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.strategy:
        overrides["concurrency_strategy"] = ConcurrencyStrategy(args.strategy)
    if args.database_url:
        overrides["database_url"] = args.database_url
    # Re-validate so flag values go through the same validators as LEDGER_ variables
    return Settings.model_validate({**get_settings().model_dump(), **overrides})


async def _open_service(
    settings: Settings, fault_injector: FaultInjector | None = None,
) -> LedgerService:
    service = await build_ledger_service(settings, fault_injector)
    if not await service.is_seeded():
        await service.seed(settings.seed_accounts)
    return service


async def _report(service: LedgerService) -> None:
    report = BalanceReport.from_balances(await service.balances())
    _emit({"balances": report.model_dump(mode="json")})


async def _demo(args: argparse.Namespace, settings: Settings) -> int:
    faults = FaultInjector()
    service = await _open_service(settings, faults)
    try:
        await _report(service)
        for from_account, to_account, amount in (
            ("Alice", "Bob", "100"),
            ("Alice", "Bob", "600"),
        ):
            outcome = await service.transfer(from_account, to_account, amount)
            _emit(outcome.to_dict())

        if args.inject_fault:
            faults.arm(FaultPoint.AFTER_DEBIT)
            outcome = await service.transfer("Alice", "Bob", "50")
            _emit(outcome.to_dict())

        outcomes = await asyncio.gather(
            service.transfer("Alice", "Bob", "100"),
            service.transfer("Bob", "Alice", "200"),
        )
        for outcome in outcomes:
            _emit(outcome.to_dict())
        await _report(service)
    finally:
        await service.aclose()
    return 0


async def _transfer(args: argparse.Namespace, settings: Settings) -> int:
    service = await _open_service(settings)
    try:
        outcome = await service.transfer(args.from_account, args.to_account, args.amount)
        _emit(outcome.to_dict())
    finally:
        await service.aclose()
    return 0 if outcome.committed else 1


async def _batch(args: argparse.Namespace, settings: Settings) -> int:
    try:
        batch = TransferBatch.model_validate_json(Path(args.file).read_text())
    except OSError as e:
        _emit({"error": {"code": "FILE_ERROR", "message": str(e)}})
        return 1
    except SchemaValidationError as e:
        _emit({"error": {"code": "VALIDATION_ERROR", "message": "Invalid batch file",
                         "details": json.loads(e.json())}})
        return 1

    service = await _open_service(settings)
    try:
        outcomes = await asyncio.gather(*(
            service.transfer(cmd.from_account, cmd.to_account, cmd.amount)
            for cmd in batch
        ))
        for outcome in outcomes:
            _emit(outcome.to_dict())
        await _report(service)
    finally:
        await service.aclose()
    return 0 if all(outcome.committed for outcome in outcomes) else 1


async def _balance(args: argparse.Namespace, settings: Settings) -> int:
    service = await _open_service(settings)
    try:
        balance = await service.balance(args.name)
    except LedgerError as e:
        _emit(e.to_dict())
        return 1
    finally:
        await service.aclose()
    _emit({"account": args.name, "balance": str(balance)})
    return 0


async def _balances(args: argparse.Namespace, settings: Settings) -> int:
    service = await _open_service(settings)
    try:
        await _report(service)
    finally:
        await service.aclose()
    return 0


def _run(handler, args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    setup_logging(args.log_level or settings.log_level, settings.log_format)
    try:
        return asyncio.run(handler(args, settings))
    except LedgerError as e:
        _emit(e.to_dict())
        return 1


def cmd_demo(args: argparse.Namespace) -> int:
    """Run the ACID walkthrough."""
    return _run(_demo, args)


def cmd_transfer(args: argparse.Namespace) -> int:
    return _run(_transfer, args)


def cmd_batch(args: argparse.Namespace) -> int:
    return _run(_batch, args)


def cmd_balance(args: argparse.Namespace) -> int:
    return _run(_balance, args)


def cmd_balances(args: argparse.Namespace) -> int:
    return _run(_balances, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acid-ledger",
        description="Transactional ledger moving funds between named accounts",
    )
    parser.add_argument(
        "--strategy", choices=[s.value for s in ConcurrencyStrategy],
        help="Concurrency strategy (default: LEDGER_CONCURRENCY_STRATEGY)",
    )
    parser.add_argument("--database-url", dest="database_url", help="Delegated store URL")
    parser.add_argument("--log-level", dest="log_level", help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    p_demo = subparsers.add_parser("demo", help="Run the ACID walkthrough")
    p_demo.add_argument(
        "--inject-fault", action="store_true", dest="inject_fault",
        help="Fail one transfer between debit and credit",
    )
    p_demo.set_defaults(func=cmd_demo)

    p_transfer = subparsers.add_parser("transfer", help="Transfer funds between accounts")
    p_transfer.add_argument("from_account", metavar="FROM")
    p_transfer.add_argument("to_account", metavar="TO")
    p_transfer.add_argument("amount", metavar="AMOUNT")
    p_transfer.set_defaults(func=cmd_transfer)

    p_batch = subparsers.add_parser("batch", help="Run a JSON file of transfers concurrently")
    p_batch.add_argument("file", help="JSON array of {from, to, amount}")
    p_batch.set_defaults(func=cmd_batch)

    p_balance = subparsers.add_parser("balance", help="Show one account balance")
    p_balance.add_argument("name")
    p_balance.set_defaults(func=cmd_balance)

    p_balances = subparsers.add_parser("balances", help="Show all balances")
    p_balances.set_defaults(func=cmd_balances)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
