"""Typer CLI interface for yieldbook."""

import logging
from contextlib import closing
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer

from yieldbook.exceptions import LedgerError
from yieldbook.models.enums import CURRENCY_SYMBOLS, AssetClass, Currency, TransactionType

app = typer.Typer(
    name="yieldbook",
    help="yieldbook: consolidate investment-app records into multi-currency ledgers.",
)

DEFAULT_DB = Path.home() / ".yieldbook" / "yieldbook.db"
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".webp"}

DbOption = typer.Option(DEFAULT_DB, "--db", envvar="YIELDBOOK_DB", help="Path to the SQLite database file")
RatesOption = typer.Option(
    None, "--rates", help="JSON file of exchange rates, e.g. {\"CNY\": 1, \"USD\": 7.2, \"HKD\": 0.92}"
)
DateOption = typer.Option(None, "--date", "-d", formats=["%Y-%m-%d"], help="Transaction date (default: today)")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions to stderr"),
) -> None:
    """yieldbook: consolidate investment-app records into multi-currency ledgers."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _converter(rates: Path | None):
    from yieldbook.engines.currency import CurrencyConverter

    if rates is None:
        return CurrencyConverter()
    if not rates.exists():
        typer.echo(f"Error: Rate file not found: {rates}", err=True)
        raise typer.Exit(1)
    try:
        return CurrencyConverter.from_file(rates)
    except (ValueError, LedgerError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


def _connect(db: Path, must_exist: bool = True):
    from yieldbook.db.schema import create_schema

    if must_exist and not db.exists():
        typer.echo("Error: No database found. Add a holding or ingest records first.", err=True)
        raise typer.Exit(1)
    db.parent.mkdir(parents=True, exist_ok=True)
    return create_schema(db)


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        typer.echo(f"Error: Invalid amount '{value}'", err=True)
        raise typer.Exit(1)
    if not amount.is_finite() or amount == 0:
        typer.echo("Error: Amount must be a non-zero number", err=True)
        raise typer.Exit(1)
    return amount


def _parse_yield(value: str | None) -> Decimal | None:
    if not value:
        return None
    try:
        declared = Decimal(value)
    except InvalidOperation:
        typer.echo(f"Error: Invalid 7-day yield '{value}'", err=True)
        raise typer.Exit(1)
    if not declared.is_finite():
        typer.echo("Error: 7-day yield must be a finite number", err=True)
        raise typer.Exit(1)
    return declared


def _fail(exc: Exception) -> None:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(1)


def _adapter_for(file_path: Path, api_key: str | None):
    from yieldbook.ingestion.manual import JSONRecordAdapter
    from yieldbook.ingestion.vision import ScreenshotAdapter

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return JSONRecordAdapter()
    if suffix in IMAGE_SUFFIXES:
        return ScreenshotAdapter(api_key=api_key)
    return None


@app.command()
def ingest(
    files: list[Path] = typer.Argument(..., help="Screenshots (.png, .jpg, .webp) or record JSON files"),
    ledger_id: str | None = typer.Option(None, "--ledger", "-l", help="Add every record to this ledger"),
    currency: Currency | None = typer.Option(None, "--currency", help="Force this currency on every record"),
    product: str | None = typer.Option(None, "--product", help="Force this product name on every record"),
    institution: str | None = typer.Option(None, "--institution", help="Force this institution on every record"),
    api_key: str | None = typer.Option(None, "--api-key", envvar="ANTHROPIC_API_KEY", help="Anthropic API key"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Extract records from screenshots or JSON files and fold them into the ledgers.

    \b
    Supported inputs:
      .png .jpg .jpeg .webp   investment-app screenshots (Claude Vision)
      .json                   [...] or {"records": [...]} of extracted records
    Set ANTHROPIC_API_KEY for screenshot support.
    """
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.pipeline import IngestionEngine, IngestionOverrides

    engine = IngestionEngine(_converter(rates))
    overrides = IngestionOverrides(currency=currency, product_name=product, institution=institution)
    errors: list[tuple[str, str]] = []

    with closing(_connect(db, must_exist=False)) as conn:
        repo = LedgerRepository(conn)
        for file_path in files:
            if not file_path.exists():
                typer.echo(f"Error: File not found: {file_path}", err=True)
                errors.append((file_path.name, "not found"))
                continue
            try:
                adapter = _adapter_for(file_path, api_key)
                if adapter is None:
                    typer.echo(f"Skipping {file_path.name}: unsupported file type", err=True)
                    continue
                records = adapter.extract(file_path)
                with repo.writer():
                    result = engine.ingest(repo.get(), records, ledger_id, overrides)
                    repo.replace(result.snapshot)
                    repo.record_import_batch(type(adapter).__name__, str(file_path), result.summary)
            except LedgerError as exc:
                typer.echo(f"Error processing {file_path.name}: {exc}", err=True)
                errors.append((file_path.name, str(exc)))
                continue

            summary = result.summary
            typer.echo(f"{file_path.name}: {summary.describe()}")
            if summary.records_dropped:
                typer.echo(f"  {summary.records_dropped} record(s) dropped (malformed or unsupported currency)")
            if summary.ambiguous_matches:
                typer.echo(f"  {summary.ambiguous_matches} group(s) matched several ledgers; created new ones")
            if summary.ledgers_merged:
                typer.echo(f"  {summary.ledgers_merged} duplicate ledger(s) merged")

    if errors:
        raise typer.Exit(1)


@app.command()
def add(
    institution: str = typer.Argument(..., help="Platform or bank, e.g. 支付宝"),
    product: str = typer.Argument(..., help="Product name"),
    amount: str = typer.Argument(..., help="Deposit amount"),
    currency: Currency = typer.Option(Currency.CNY, "--currency", "-c"),
    asset_class: AssetClass = typer.Option(AssetClass.FUND, "--asset-class", "-a"),
    on_date: datetime | None = DateOption,
    seven_day_yield: str | None = typer.Option(None, "--seven-day-yield", help="Declared 7-day yield (%)"),
    remark: str = typer.Option("", "--remark"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Record a manual deposit, creating the ledger if it does not exist yet."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator
    from yieldbook.normalization.ledger import LedgerBuilder

    builder = LedgerBuilder(LedgerConsolidator(_converter(rates)))
    declared = _parse_yield(seven_day_yield)
    with closing(_connect(db, must_exist=False)) as conn:
        repo = LedgerRepository(conn)
        with repo.writer():
            snapshot, ledger = builder.add_holding(
                repo.get(),
                institution=institution,
                product_name=product,
                currency=currency,
                amount=_parse_amount(amount),
                on_date=on_date.date() if on_date else date.today(),
                asset_class=asset_class,
                seven_day_yield=declared,
                remark=remark,
            )
            repo.replace(snapshot)
    typer.echo(f"{ledger.product_name} ({ledger.id}): {CURRENCY_SYMBOLS[ledger.currency]}{ledger.current_amount:.2f}")


@app.command(name="tx-add")
def tx_add(
    ledger_id: str = typer.Argument(...),
    amount: str = typer.Argument(...),
    tx_type: TransactionType = typer.Option(TransactionType.EARNING, "--type", "-t"),
    on_date: datetime | None = DateOption,
    currency: Currency | None = typer.Option(None, "--currency", "-c", help="Defaults to the ledger's currency"),
    description: str = typer.Option("手动记录", "--description"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Add a transaction to a ledger and recompute its totals."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator
    from yieldbook.models.ledger import Transaction
    from yieldbook.normalization.ledger import LedgerBuilder

    builder = LedgerBuilder(LedgerConsolidator(_converter(rates)))
    tx = Transaction(
        date=on_date.date() if on_date else date.today(),
        type=tx_type,
        amount=_parse_amount(amount),
        currency=currency,
        description=description,
    )
    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        try:
            with repo.writer():
                repo.replace(builder.add_transaction(repo.get(), ledger_id, tx))
        except LedgerError as exc:
            _fail(exc)
    typer.echo(f"Added {tx.type.value} {tx.amount} on {tx.date} ({tx.id})")


@app.command(name="tx-edit")
def tx_edit(
    ledger_id: str = typer.Argument(...),
    transaction_id: str = typer.Argument(...),
    amount: str | None = typer.Option(None, "--amount"),
    tx_type: TransactionType | None = typer.Option(None, "--type", "-t"),
    on_date: datetime | None = DateOption,
    currency: Currency | None = typer.Option(None, "--currency", "-c"),
    description: str | None = typer.Option(None, "--description"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Replace a transaction with an edited copy and recompute the ledger."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator
    from yieldbook.exceptions import LedgerNotFoundError, TransactionNotFoundError
    from yieldbook.normalization.ledger import LedgerBuilder

    builder = LedgerBuilder(LedgerConsolidator(_converter(rates)))
    changes: dict = {}
    if amount is not None:
        changes["amount"] = _parse_amount(amount)
    if tx_type is not None:
        changes["type"] = tx_type
    if on_date is not None:
        changes["date"] = on_date.date()
    if currency is not None:
        changes["currency"] = currency
    if description is not None:
        changes["description"] = description
    if not changes:
        typer.echo("Nothing to change.")
        raise typer.Exit(0)

    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        try:
            with repo.writer():
                snapshot = repo.get()
                ledger = next((item for item in snapshot if item.id == ledger_id), None)
                if ledger is None:
                    raise LedgerNotFoundError(ledger_id)
                existing = ledger.find_transaction(transaction_id)
                if existing is None:
                    raise TransactionNotFoundError(ledger_id, transaction_id)
                repo.replace(builder.replace_transaction(snapshot, ledger_id, existing.model_copy(update=changes)))
        except LedgerError as exc:
            _fail(exc)
    typer.echo(f"Updated transaction {transaction_id}")


@app.command(name="tx-delete")
def tx_delete(
    ledger_id: str = typer.Argument(...),
    transaction_id: str = typer.Argument(...),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Remove a transaction and recompute the ledger."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator
    from yieldbook.normalization.ledger import LedgerBuilder

    builder = LedgerBuilder(LedgerConsolidator(_converter(rates)))
    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        try:
            with repo.writer():
                repo.replace(builder.remove_transaction(repo.get(), ledger_id, transaction_id))
        except LedgerError as exc:
            _fail(exc)
    typer.echo(f"Deleted transaction {transaction_id}")


@app.command()
def edit(
    ledger_id: str = typer.Argument(...),
    institution: str | None = typer.Option(None, "--institution"),
    product: str | None = typer.Option(None, "--product"),
    asset_class: AssetClass | None = typer.Option(None, "--asset-class", "-a"),
    currency: Currency | None = typer.Option(None, "--currency"),
    earnings_currency: Currency | None = typer.Option(None, "--earnings-currency"),
    seven_day_yield: str | None = typer.Option(None, "--seven-day-yield"),
    remark: str | None = typer.Option(None, "--remark"),
    db: Path = DbOption,
) -> None:
    """Edit ledger metadata. Totals are left as they are until the next consolidation."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.normalization.ledger import LedgerBuilder

    changes = {
        key: value
        for key, value in (
            ("institution", institution),
            ("product_name", product),
            ("asset_class", asset_class),
            ("currency", currency),
            ("earnings_currency", earnings_currency),
            ("seven_day_yield", _parse_yield(seven_day_yield)),
            ("remark", remark),
        )
        if value is not None
    }
    if not changes:
        typer.echo("Nothing to change.")
        raise typer.Exit(0)

    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        try:
            with repo.writer():
                repo.replace(LedgerBuilder.update_metadata(repo.get(), ledger_id, **changes))
        except LedgerError as exc:
            _fail(exc)
    typer.echo(f"Updated ledger {ledger_id}: {', '.join(sorted(changes))}")


@app.command()
def delete(
    ledger_id: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    db: Path = DbOption,
) -> None:
    """Delete a ledger and its entire history."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.normalization.ledger import LedgerBuilder

    if not yes:
        typer.confirm(f"Delete ledger {ledger_id} and all of its history?", abort=True)
    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        try:
            with repo.writer():
                repo.replace(LedgerBuilder.delete_ledger(repo.get(), ledger_id))
        except LedgerError as exc:
            _fail(exc)
    typer.echo(f"Deleted ledger {ledger_id}")


def _load_consolidated(db: Path, rates: Path | None):
    """Read the snapshot and refresh derived totals before display."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator

    converter = _converter(rates)
    with closing(_connect(db)) as conn:
        ledgers = LedgerConsolidator(converter).consolidate(LedgerRepository(conn).get())
    return converter, ledgers


@app.command()
def show(
    display_currency: Currency = typer.Option(Currency.CNY, "--currency", "-c", help="Display currency"),
    report: bool = typer.Option(False, "--report", help="Print the full text dashboard instead of a table"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Show every ledger with its holdings and yields."""
    from rich.console import Console
    from rich.table import Table

    from yieldbook.engines.portfolio import PortfolioAnalyzer
    from yieldbook.engines.yields import YieldCalculator
    from yieldbook.reports.portfolio import PortfolioReportGenerator

    converter, ledgers = _load_consolidated(db, rates)
    today = date.today()
    calculator = YieldCalculator(converter)
    yields = {ledger.id: calculator.report(ledger, today) for ledger in ledgers}
    summary = PortfolioAnalyzer(converter).summarize(ledgers, display_currency, today)

    if report:
        typer.echo(PortfolioReportGenerator().render(summary, ledgers, yields))
        return

    symbol = CURRENCY_SYMBOLS[display_currency]
    table = Table(title=f"Holdings ({display_currency.value})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Institution")
    table.add_column("Product")
    table.add_column("Amount", justify="right")
    table.add_column("Earnings", justify="right")
    table.add_column("Holding %", justify="right")
    table.add_column("7d ann. %", justify="right")
    table.add_column("Overall ann. %", justify="right")
    for ledger in ledgers:
        result = yields[ledger.id]
        table.add_row(
            ledger.id[:8],
            ledger.institution,
            f"{ledger.product_name} [{ledger.currency.value}]",
            f"{CURRENCY_SYMBOLS[ledger.currency]}{ledger.current_amount:,.2f}",
            f"{CURRENCY_SYMBOLS[ledger.earnings_currency]}{ledger.total_earnings:,.2f}",
            f"{result.holding_yield:.2f}",
            f"{result.seven_day_annualized:.2f}",
            f"{result.overall_annualized:.2f}",
        )

    console = Console()
    console.print(table)
    console.print(
        f"Total assets {symbol}{summary.total_assets:,.2f} | "
        f"earnings {symbol}{summary.total_earnings:,.2f} | "
        f"yield {summary.total_yield:.2f}% | annualized {summary.annualized_yield:.2f}%"
    )


@app.command()
def statement(
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Print every transaction grouped by month, most recent first."""
    from yieldbook.engines.portfolio import PortfolioAnalyzer
    from yieldbook.reports.statement import StatementReportGenerator

    _, ledgers = _load_consolidated(db, rates)
    typer.echo(StatementReportGenerator().render(PortfolioAnalyzer.statement(ledgers)))


@app.command()
def calendar(
    ledger_id: str = typer.Argument(...),
    month: str | None = typer.Option(None, "--month", "-m", help="YYYY-MM (default: current month)"),
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Print one ledger's daily earnings for a month."""
    from yieldbook.engines.matcher import AssetMatcher
    from yieldbook.engines.portfolio import PortfolioAnalyzer
    from yieldbook.reports.calendar import CalendarReportGenerator

    if month:
        try:
            first = datetime.strptime(month, "%Y-%m").date()
        except ValueError:
            typer.echo(f"Error: Invalid month '{month}'. Use YYYY-MM.", err=True)
            raise typer.Exit(1)
    else:
        first = date.today().replace(day=1)

    _, ledgers = _load_consolidated(db, rates)
    try:
        ledger = AssetMatcher.find_by_id(ledgers, ledger_id)
    except LedgerError as exc:
        _fail(exc)
    days = PortfolioAnalyzer.earnings_calendar(ledger, first.year, first.month)
    typer.echo(CalendarReportGenerator().render(ledger, first.year, first.month, days))


@app.command()
def consolidate(
    db: Path = DbOption,
    rates: Path | None = RatesOption,
) -> None:
    """Merge duplicate ledgers and rebuild every ledger's totals from history."""
    from yieldbook.db.repository import LedgerRepository
    from yieldbook.engines.consolidator import LedgerConsolidator

    consolidator = LedgerConsolidator(_converter(rates))
    with closing(_connect(db)) as conn:
        repo = LedgerRepository(conn)
        with repo.writer():
            before = repo.get()
            after = consolidator.consolidate(before)
            repo.replace(after)
    typer.echo(f"Consolidated {len(before)} ledger(s) into {len(after)}.")
