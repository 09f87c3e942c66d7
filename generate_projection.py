"""
Portfolio Projection Report

Runs a deterministic or Monte Carlo projection from command-line flags or a
JSON inputs file, prints a year-by-year summary, and optionally writes the
result as JSON, the yearly table as CSV and a fan chart as an image.
"""

import json
import logging
from dataclasses import replace
from typing import Optional

import matplotlib.pyplot as plt

from finsim import (
    DETERMINISTIC,
    MONTE_CARLO,
    MonteCarloParams,
    MonteCarloResult,
    ProjectionInputs,
    SimulationResult,
    projection_inputs_from_dict,
    run_projection,
    snapshots_to_frame,
    percentiles_to_frame,
    write_json,
)
from visualization import apply_standard_style, create_projection_figure

logger = logging.getLogger(__name__)


def build_inputs(
    config_path: Optional[str] = None,
    lump_sum: Optional[float] = None,
    amount: Optional[float] = None,
    frequency: Optional[str] = None,
    years: Optional[int] = None,
    scenario: Optional[str] = None,
    fees: Optional[float] = None,
    inflation: Optional[float] = None,
    target: Optional[float] = None,
) -> ProjectionInputs:
    """
    Projection inputs from an optional JSON file, with explicit values on top.

    Arguments left as None keep the file's value (or the dataclass default).
    """
    if config_path is not None:
        with open(config_path) as f:
            inputs = projection_inputs_from_dict(json.load(f))
    else:
        inputs = ProjectionInputs()

    contribution_changes = {
        k: v for k, v in (('amount', amount), ('frequency', frequency)) if v is not None
    }
    assumption_changes = {
        k: v for k, v in (('scenario', scenario), ('fees', fees), ('inflation', inflation))
        if v is not None
    }
    input_changes = {
        k: v for k, v in (('lump_sum', lump_sum), ('duration_years', years), ('target_amount', target))
        if v is not None
    }

    if contribution_changes:
        input_changes['contribution'] = replace(inputs.contribution, **contribution_changes)
    if assumption_changes:
        input_changes['assumptions'] = replace(inputs.assumptions, **assumption_changes)

    return inputs.with_changes(**input_changes)


def print_summary(inputs: ProjectionInputs, result: SimulationResult) -> None:
    """Print the year-by-year table and headline numbers."""
    is_mc = isinstance(result, MonteCarloResult)

    print("=" * 72)
    print("PORTFOLIO PROJECTION" + (f" (Monte Carlo, {result.n_simulations} trials)" if is_mc else ""))
    print("=" * 72)
    print(f"Lump sum:              ${inputs.lump_sum:>14,.2f}")
    print(f"Monthly contribution:  ${result.monthly_contribution:>14,.2f}")
    print(f"Horizon:               {inputs.duration_years:>15d} years")
    print(f"Scenario:              {inputs.assumptions.scenario.value:>15s}")
    print()

    if is_mc:
        print(f"{'Year':>4}  {'Contributed':>14}  {'p10':>14}  {'Median':>14}  {'p90':>14}")
        for snap, band in zip(result.yearly_snapshots, result.percentiles):
            print(f"{snap.year:>4}  {snap.contributions:>14,.2f}  {band.p10:>14,.2f}  "
                  f"{band.p50:>14,.2f}  {band.p90:>14,.2f}")
    else:
        print(f"{'Year':>4}  {'Contributed':>14}  {'Value':>14}  {'Returns':>14}")
        for snap in result.yearly_snapshots:
            print(f"{snap.year:>4}  {snap.contributions:>14,.2f}  {snap.portfolio_value:>14,.2f}  "
                  f"{snap.returns:>14,.2f}")

    print()
    print(f"Final value:           ${result.final_value:>14,.2f}")
    print(f"Final value (real):    ${result.final_value_real:>14,.2f}")
    print(f"Total contributions:   ${result.total_contributions:>14,.2f}")
    print(f"Total returns:         ${result.total_returns:>14,.2f}")
    if result.success_probability is not None:
        print(f"Chance of reaching target: {result.success_probability:>10.1%}")
    if result.required_monthly is not None:
        print(f"Required monthly:      ${result.required_monthly:>14,.2f}")


def main(
    inputs: ProjectionInputs = None,
    mode: str = DETERMINISTIC,
    mc_params: MonteCarloParams = None,
    output_path: Optional[str] = None,
    csv_path: Optional[str] = None,
    plot_path: Optional[str] = None,
    verbose: bool = True,
) -> SimulationResult:
    """
    Run a projection and write the requested outputs.

    Args:
        inputs: Projection inputs (defaults to ProjectionInputs())
        mode: 'deterministic' or 'monte_carlo'
        mc_params: Monte Carlo parameters (ignored in deterministic mode)
        output_path: Write the result as JSON here
        csv_path: Write the yearly table (and percentiles) as CSV here
        plot_path: Save the projection figure here
        verbose: Print the summary table

    Returns:
        The projection result
    """
    if inputs is None:
        inputs = ProjectionInputs()

    result = run_projection(inputs, mode, mc_params)

    if verbose:
        print_summary(inputs, result)

    if output_path:
        write_json(output_path, result)
        logger.info("Wrote result JSON to %s", output_path)

    if csv_path:
        frame = snapshots_to_frame(result)
        if isinstance(result, MonteCarloResult):
            frame = frame.join(percentiles_to_frame(result))
        frame.to_csv(csv_path)
        logger.info("Wrote yearly table to %s", csv_path)

    if plot_path:
        apply_standard_style()
        fig = create_projection_figure(result, inputs.allocation, inputs.target_amount)
        fig.savefig(plot_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.info("Saved projection figure to %s", plot_path)

    return result


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(
        description='Project portfolio value from contributions and allocation'
    )
    parser.add_argument('--mode', choices=[DETERMINISTIC, MONTE_CARLO], default=DETERMINISTIC,
                        help='Projection engine (default: deterministic)')
    parser.add_argument('--config', default=None,
                        help='JSON file with ProjectionInputs fields; flags below override it')
    parser.add_argument('--lump-sum', type=float, default=None,
                        help='Initial investment (default: 0)')
    parser.add_argument('--amount', type=float, default=None,
                        help='Periodic contribution amount (default: 0)')
    parser.add_argument('--frequency', choices=['daily', 'weekly', 'monthly', 'quarterly'], default=None,
                        help='Contribution frequency (default: monthly)')
    parser.add_argument('--years', type=int, default=None,
                        help='Projection horizon in years (default: 10)')
    parser.add_argument('--scenario', choices=['low', 'medium', 'high', 'custom'], default=None,
                        help='Market return scenario (default: medium)')
    parser.add_argument('--fees', type=float, default=None,
                        help='Annual fees as a fraction (default: 0.005 = 0.5%%)')
    parser.add_argument('--inflation', type=float, default=None,
                        help='Annual inflation as a fraction (default: 0.0)')
    parser.add_argument('--target', type=float, default=None,
                        help="Goal amount in today's money")
    parser.add_argument('--n-sims', type=int, default=500,
                        help='Monte Carlo trials (default: 500)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed (default: 42)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Threads for Monte Carlo batches (default: 1)')
    parser.add_argument('-o', '--output', default=None,
                        help='Write the result as JSON to this path')
    parser.add_argument('--csv', default=None,
                        help='Write the yearly table as CSV to this path')
    parser.add_argument('--plot', default=None,
                        help='Save a projection chart to this path (e.g. projection.png)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress the summary table')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    main(
        inputs=build_inputs(
            config_path=args.config,
            lump_sum=args.lump_sum,
            amount=args.amount,
            frequency=args.frequency,
            years=args.years,
            scenario=args.scenario,
            fees=args.fees,
            inflation=args.inflation,
            target=args.target,
        ),
        mode=args.mode,
        mc_params=MonteCarloParams(
            n_simulations=args.n_sims,
            random_seed=args.seed,
            n_workers=args.workers,
        ),
        output_path=args.output,
        csv_path=args.csv,
        plot_path=args.plot,
        verbose=not args.quiet,
    )
