"""
reelspin CLI

Command-line access to the spin engine:
- listing machines and their weight caches
- playing single spins (storage passed in and printed back out)
- Monte Carlo simulation of a machine

Usage:
    reelspin --help
    reelspin machines
    reelspin spin classic3 --max-lines 5 --bet-per-line 2
    reelspin spin classic3 --max-lines 5 --bet-per-line 2 --storage '{"freeSpin": {"total": 3, "multiplier": 2}}'
    reelspin simulate fruity5 --num-spins 100000 --seed 42
"""

import json

import click
from marshmallow import ValidationError

from reelspin.config import Config
from reelspin.exceptions import AppException
from reelspin.logging_setup import configure_logging
from reelspin.schemas import SpinResultSchema, StorageSchema
from reelspin.utils.game_config_manager import MachineConfigManager
from reelspin.utils.random_source import RandomSource
from reelspin.utils.slot_tester import SlotTester
from reelspin.utils.spin_handler import spin as play_spin
from reelspin.utils.spin_logger import SpinLogger


def _load_machine(name):
    try:
        return MachineConfigManager.get_machine(name)
    except AppException as e:
        raise click.ClickException(f"{e.status_message} {json.dumps(e.details) if e.details else ''}".strip())


@click.group()
@click.option('--machines-dir', default=None, help='Directory holding <name>/machine.json definitions')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, machines_dir, verbose):
    """reelspin - slot machine spin engine."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    configure_logging('DEBUG' if verbose else Config.LOG_LEVEL, Config.JSON_LOGS)
    MachineConfigManager.configure(machines_dir or Config.MACHINES_DIR, Config.CONFIG_CACHE_TTL)


@cli.command()
def machines():
    """List available machines."""
    names = MachineConfigManager.list_machines()
    if not names:
        click.echo("No machines found.")
        return
    for name in names:
        click.echo(name)


@cli.command()
@click.argument('machine')
def cache(machine):
    """Print the per-reel weight totals of MACHINE."""
    _config, weight_cache = _load_machine(machine)
    click.echo(json.dumps(weight_cache))


@cli.command()
@click.argument('machine')
@click.option('--max-lines', type=click.IntRange(min=0), required=True, help='Number of paylines played')
@click.option('--bet-per-line', type=click.FloatRange(min=0), required=True, help='Stake on each payline')
@click.option('--storage', 'storage_json', default=None, help='Storage JSON returned by the previous spin')
@click.option('--seed', type=int, default=None, help='Seed for a reproducible spin')
def spin(machine, max_lines, bet_per_line, storage_json, seed):
    """Play one spin on MACHINE and print the result as JSON."""
    config, weight_cache = _load_machine(machine)

    storage = None
    if storage_json:
        try:
            storage = StorageSchema().load(json.loads(storage_json))
        except (json.JSONDecodeError, ValidationError) as e:
            raise click.BadParameter(str(e), param_hint='--storage')

    bet = int(bet_per_line) if float(bet_per_line).is_integer() else bet_per_line
    rng = RandomSource(seed if seed is not None else Config.RNG_SEED)
    result = play_spin(max_lines, bet, config, weight_cache, storage, rng)
    SpinLogger.log_spin_event(machine, max_lines, bet, result, storage, details={'source': 'cli'})
    click.echo(json.dumps(SpinResultSchema().dump(result), indent=2))


@cli.command()
@click.argument('machine')
@click.option('--num-spins', type=click.IntRange(min=1), default=10000, show_default=True, help='Number of spins to simulate')
@click.option('--max-lines', type=click.IntRange(min=0), default=None, help='Paylines played (default: all)')
@click.option('--bet-per-line', type=click.IntRange(min=1), default=1, show_default=True, help='Stake on each payline')
@click.option('--seed', type=int, default=None, help='Seed for a reproducible run')
@click.option('--json', 'as_json', is_flag=True, help='Print the summary as JSON')
def simulate(machine, num_spins, max_lines, bet_per_line, seed, as_json):
    """Simulate NUM_SPINS chained spins on MACHINE and report RTP statistics."""
    if num_spins > Config.MAX_SIMULATION_SPINS:
        raise click.BadParameter(f"at most {Config.MAX_SIMULATION_SPINS} spins per run", param_hint='--num-spins')

    config, weight_cache = _load_machine(machine)
    lines = len(config.lines) if max_lines is None else max_lines
    rng = RandomSource(seed if seed is not None else Config.RNG_SEED)

    tester = SlotTester(config, weight_cache, num_spins, lines, bet_per_line, rng)
    summary = tester.run_simulation()
    SpinLogger.log_simulation_event(machine, summary, seed=rng.seed)

    if as_json:
        click.echo(json.dumps(summary, indent=2))
    else:
        tester.print_summary_statistics(echo=click.echo)


if __name__ == '__main__':
    cli()
