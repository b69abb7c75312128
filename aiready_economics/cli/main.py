"""
CLI interface for AIReady unit economics.

Provides command-line access to cost, acceptance and value-chain estimates.
"""

import json
import logging
import sys
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aiready_economics.config.loader import (
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    load_engine_config,
)
from aiready_economics.core.acceptance import ToolScoringOutput, predict_acceptance_rate
from aiready_economics.core.cost import (
    CostEstimate,
    UsageAssumptions,
    calculate_monthly_cost,
    estimate_cost,
)
from aiready_economics.core.pricing import ModelPricingPreset, resolve_pricing_preset
from aiready_economics.core.token_budget import WastedTokenBreakdown, compute_budget
from aiready_economics.core.value_chain import (
    DEFAULT_HOURLY_RATE,
    IssueClassification,
    calculate_productivity_impact,
    generate_value_chain,
)

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

# Engine, config and file errors shown as a red Error line
CLI_ERRORS = (ValueError, FileNotFoundError, yaml.YAMLError)

ConfigOption = typer.Option(None, "--config", "-c", help="Path to YAML engine config")
JsonOption = typer.Option(False, "--json", help="Print result as JSON")
PresetOption = typer.Option(None, "--preset", "-p", help="Pricing preset name")
DevelopersOption = typer.Option(None, "--developers", "-d", help="Number of developers")
QueriesOption = typer.Option(None, "--queries", "-q", help="AI queries per developer per day")
DaysOption = typer.Option(None, "--days", help="Working days per month")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """AIReady unit economics CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print("AIReady Economics - Use --help to see available commands")


def _load_config(path: Optional[str]) -> EngineConfig:
    if path is None:
        return DEFAULT_ENGINE_CONFIG
    return load_engine_config(path)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/] {escape(message)}")
    sys.exit(EXIT_CODE_FAIL)


def _resolve_preset(name: Optional[str], config: EngineConfig) -> ModelPricingPreset:
    """Resolve a preset name, warning instead of failing on unknown names."""
    if name is not None and name not in config.pricing.presets:
        console.print(
            f"[yellow]Unknown preset '{name}', using '{config.pricing.default_name}'[/]"
        )
        return config.pricing.default
    return resolve_pricing_preset(name, config.pricing)


def _build_usage(
    config: EngineConfig,
    developers: Optional[int],
    queries: Optional[int],
    days: Optional[int],
) -> Optional[UsageAssumptions]:
    """Override default usage with any values given on the command line."""
    if developers is None and queries is None and days is None:
        return None
    defaults = config.default_usage
    return UsageAssumptions(
        developer_count=developers if developers is not None else defaults.developer_count,
        queries_per_dev_per_day=(
            queries if queries is not None else defaults.queries_per_dev_per_day
        ),
        days_per_month=days if days is not None else defaults.days_per_month,
    )


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${abs(amount):,.2f}"


def _format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def _display_cost(estimate: CostEstimate, preset_name: str, price_per_1k) -> None:
    low, high = estimate.range
    console.print(f"Pricing preset: {preset_name} (${price_per_1k}/1K tokens)")
    console.print(f"Estimated monthly cost: {_format_currency(estimate.total)}")
    console.print(f"Range: {_format_currency(low)} - {_format_currency(high)}")
    console.print(f"Confidence: {_format_percent(estimate.confidence)}")


@app.command()
def presets(config_path: Optional[str] = ConfigOption):
    """List registered pricing presets."""
    try:
        config = _load_config(config_path)
    except CLI_ERRORS as e:
        _fail(str(e))

    table = Table(title="Pricing Presets")
    table.add_column("Preset")
    table.add_column("$/1K tokens", justify="right")
    table.add_column("Confidence", justify="right")
    for name in config.pricing.names():
        preset = config.pricing.lookup(name)
        label = f"{name} (default)" if name == config.pricing.default_name else name
        table.add_row(
            label,
            str(preset.price_per_1k_tokens),
            _format_percent(preset.baseline_confidence),
        )
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def budget(
    total: int = typer.Argument(..., help="Total context tokens"),
    duplication: int = typer.Option(0, "--duplication", help="Tokens wasted on duplicates"),
    fragmentation: int = typer.Option(0, "--fragmentation", help="Tokens wasted on fragmentation"),
    chattiness: int = typer.Option(0, "--chattiness", help="Tokens wasted on chatty content"),
    preset: Optional[str] = PresetOption,
    developers: Optional[int] = DevelopersOption,
    queries: Optional[int] = QueriesOption,
    days: Optional[int] = DaysOption,
    config_path: Optional[str] = ConfigOption,
    json_output: bool = JsonOption,
):
    """
    Compute a token budget and the monthly cost of its waste.
    """
    try:
        config = _load_config(config_path)
        token_budget = compute_budget(
            total,
            WastedTokenBreakdown(
                duplication=duplication,
                fragmentation=fragmentation,
                chattiness=chattiness,
            ),
        )
        pricing_preset = _resolve_preset(preset, config)
        usage = _build_usage(config, developers, queries, days)
        estimate = estimate_cost(token_budget, pricing_preset, usage, config=config.cost)
    except CLI_ERRORS as e:
        _fail(str(e))

    if json_output:
        typer.echo(json.dumps({
            "budget": token_budget.to_dict(),
            "cost": estimate.to_dict(),
        }, indent=2))
        sys.exit(EXIT_CODE_PASS)

    console.print("\n[bold]Token Budget[/bold]")
    console.print("-" * 40)
    console.print(f"Total context tokens: {token_budget.total_context_tokens:,}")
    console.print(f"Wasted tokens: {token_budget.wasted_tokens.total:,}")
    console.print(f"Efficiency: {_format_percent(token_budget.efficiency_ratio)}")
    console.print(f"Recoverable tokens: {token_budget.potential_retrievable_tokens:,}")
    console.print()
    _display_cost(estimate, pricing_preset.name, pricing_preset.price_per_1k_tokens)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def cost(
    tokens: int = typer.Argument(..., help="Wasted tokens per query"),
    preset: Optional[str] = PresetOption,
    price_per_1k: Optional[float] = typer.Option(
        None, "--price-per-1k", help="Override price per 1K tokens"
    ),
    developers: Optional[int] = DevelopersOption,
    queries: Optional[int] = QueriesOption,
    days: Optional[int] = DaysOption,
    config_path: Optional[str] = ConfigOption,
    json_output: bool = JsonOption,
):
    """
    Estimate the monthly cost of a raw wasted-token count.
    """
    try:
        config = _load_config(config_path)
        pricing_preset = _resolve_preset(preset, config)
        usage = _build_usage(config, developers, queries, days)
        estimate = calculate_monthly_cost(
            tokens,
            usage=usage,
            preset=pricing_preset,
            price_per_1k_tokens=price_per_1k,
            registry=config.pricing,
            config=config.cost,
        )
    except CLI_ERRORS as e:
        _fail(str(e))

    if json_output:
        typer.echo(json.dumps(estimate.to_dict(), indent=2))
        sys.exit(EXIT_CODE_PASS)

    console.print("\n[bold]Monthly Waste Cost[/bold]")
    console.print("-" * 40)
    if price_per_1k is not None:
        _display_cost(estimate, "custom", price_per_1k)
    else:
        _display_cost(estimate, pricing_preset.name, pricing_preset.price_per_1k_tokens)
    sys.exit(EXIT_CODE_PASS)


def _parse_score(value: str) -> ToolScoringOutput:
    tool_name, sep, raw_score = value.partition("=")
    if not sep or not tool_name:
        raise ValueError(f"Invalid score '{value}', expected TOOL=SCORE")
    try:
        score = float(raw_score)
    except ValueError:
        raise ValueError(f"Invalid score '{value}', SCORE must be a number")
    return ToolScoringOutput(tool_name=tool_name.strip(), score=score)


@app.command()
def acceptance(
    scores: List[str] = typer.Option(
        ..., "--score", "-s", help="Tool score as TOOL=SCORE (repeatable)"
    ),
    config_path: Optional[str] = ConfigOption,
    json_output: bool = JsonOption,
):
    """
    Predict the acceptance rate of AI suggestions from tool scores.
    """
    try:
        config = _load_config(config_path)
        tool_outputs = {}
        for value in scores:
            output = _parse_score(value)
            tool_outputs[output.tool_name] = output
        prediction = predict_acceptance_rate(tool_outputs, config=config.acceptance)
    except CLI_ERRORS as e:
        _fail(str(e))

    if json_output:
        typer.echo(json.dumps(prediction.to_dict(), indent=2))
        sys.exit(EXIT_CODE_PASS)

    console.print(f"\n[bold]Predicted acceptance rate:[/bold] {_format_percent(prediction.rate)}")
    if prediction.factors:
        table = Table()
        table.add_column("Tool")
        table.add_column("Weight", justify="right")
        table.add_column("Contribution", justify="right")
        for factor in prediction.factors:
            table.add_row(
                factor.tool_name,
                f"{factor.weight:.2f}",
                f"{factor.contribution * 100:+.1f} pts",
            )
        console.print(table)
    ignored = [name for name in tool_outputs if name not in config.acceptance.tool_weights]
    if ignored:
        console.print(f"[dim]Ignored tools without a weight: {', '.join(ignored)}[/]")
    sys.exit(EXIT_CODE_PASS)


@app.command("value-chain")
def value_chain(
    issue_type: str = typer.Argument(..., help="Issue type, e.g. context-fragmentation"),
    count: int = typer.Option(1, "--count", "-n", help="Number of occurrences"),
    severity: str = typer.Option("major", "--severity", help="minor, major or critical"),
    hourly_rate: float = typer.Option(
        DEFAULT_HOURLY_RATE, "--hourly-rate", help="Developer hourly rate"
    ),
    config_path: Optional[str] = ConfigOption,
    json_output: bool = JsonOption,
):
    """
    Link a technical issue to productivity loss and business cost.
    """
    try:
        config = _load_config(config_path)
        issue = IssueClassification(issue_type=issue_type, count=count, severity=severity)
        chain = generate_value_chain(issue, config=config.value_chain)
        impact = calculate_productivity_impact(
            [issue], hourly_rate=hourly_rate, config=config.value_chain
        )
    except CLI_ERRORS as e:
        _fail(str(e))

    if json_output:
        typer.echo(json.dumps({
            "value_chain": chain.to_dict(),
            "productivity_impact": impact.to_dict(),
        }, indent=2))
        sys.exit(EXIT_CODE_PASS)

    console.print(f"\n[bold]Issue:[/bold] {issue.issue_type} x{issue.count}")
    console.print("-" * 40)
    console.print(
        f"Productivity loss: {_format_percent(chain.developer_impact.productivity_loss)}"
    )
    console.print(f"Risk level: {chain.business_outcome.risk_level.value}")
    console.print(
        f"Opportunity cost: {_format_currency(chain.business_outcome.opportunity_cost)}"
    )
    console.print(
        f"Estimated fix time: {impact.total_hours:,.1f}h "
        f"({_format_currency(impact.total_cost)})"
    )
    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
