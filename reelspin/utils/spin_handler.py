import logging
from typing import Callable, List, Optional

from reelspin.exceptions import SelectionError
from reelspin.models import FreeSpinState, Grid, LineWin, MachineConfig, SpinResult, Storage
from reelspin.utils.random_source import RandomSource

logger = logging.getLogger(__name__)


def build_cache(config: MachineConfig) -> List[int]:
    """
    Sums the symbol weights of every reel.

    The result bounds the random draw for each reel and only depends on the
    machine definition, so callers compute it once per machine and reuse it.

    Args:
        config (MachineConfig): The machine definition.

    Returns:
        list[int]: One total weight per reel, in reel order.
    """
    return [sum(weights) for weights in config.reels]


def select(reel: int, weights: List[int], draw: int) -> int:
    """
    Resolves a draw in ``[1, total weight]`` to a symbol index on one reel.

    A symbol with weight ``w`` owns a contiguous block of ``w`` draws, so the
    first index whose running weight total reaches ``draw`` is the hit.

    Args:
        reel (int): Reel index, only used for error reporting.
        weights (list[int]): The reel's symbol weights, index = symbol id.
        draw (int): Uniform integer in ``[1, sum(weights)]``.

    Returns:
        int: The selected symbol id.

    Raises:
        SelectionError: If ``draw`` is below 1 or above the reel's total weight.
    """
    if draw >= 1:
        running_total = 0
        for index, weight in enumerate(weights):
            running_total += weight
            if running_total >= draw:
                return index
    raise SelectionError(reel, weights, draw)


def generate_grid(config: MachineConfig, cache: List[int], rng: Optional[Callable[[int], int]] = None) -> Grid:
    """
    Fills a rows x reels grid with weighted symbols and counts scatter hits.

    Scatter (free spin) symbols are counted across the whole grid, not per
    line. A free spin award found here is only paid out on later spins through
    the storage returned by ``digest``; it never touches the current payout.

    Args:
        config (MachineConfig): The machine definition.
        cache (list[int]): Weight totals from ``build_cache``.
        rng (callable, optional): ``rng(maximum)`` returning an int in ``[1, maximum]``.

    Returns:
        Grid: The drawn symbols and this grid's free spin outcome.

    Raises:
        SelectionError: If a reel has no positive entry in ``cache``.
    """
    rng = rng if rng is not None else RandomSource()
    scatter_id = config.free_spin_index

    symbols = []
    scatter_count = 0
    for _row in range(config.rows):
        row_symbols = []
        for reel, weights in enumerate(config.reels):
            # a zero-weight or uncached reel cannot be drawn from; let select() reject it
            bound = cache[reel] if reel < len(cache) else 0
            draw = rng(bound) if bound > 0 else 0
            symbol = select(reel, weights, draw)
            if scatter_id is not None and symbol == scatter_id:
                scatter_count += 1
            row_symbols.append(symbol)
        symbols.append(row_symbols)

    free_spin = FreeSpinState(symbols=scatter_count)
    if scatter_id is not None and scatter_count > 0:
        condition = config.free_spin.condition_for(scatter_count)
        if condition is not None and condition.total:
            free_spin.total = condition.total
            free_spin.multiplier = 1 if condition.multiply is None else condition.multiply
            logger.debug("Grid awarded %s free spins (x%s) for %s scatter symbols",
                         free_spin.total, free_spin.multiplier, scatter_count)

    return Grid(symbols=symbols, free_spin=free_spin)


def mask(config, grid):
    """Reads every configured payline off the grid, one symbol per reel."""
    return [
        [grid.symbols[row][reel] for reel, row in enumerate(line)]
        for line in config.lines
    ]


# --- Helper Functions for execute ---

def _anchor_symbol(line, wild_id):
    """
    The symbol a line's run is built from.

    Without a wild this is the leftmost symbol. With a wild it is the first
    non-wild symbol; a line made only of wilds anchors on the wild itself.
    """
    if wild_id is None:
        return line[0]
    symbol = None
    for symbol in line:
        if symbol != wild_id:
            break
    return symbol


def evaluate_line(line, wild_id=None):
    """
    Measures the run at the start of a payline.

    Args:
        line (list[int]): Symbols on the payline, left to right.
        wild_id (int | None): The wild symbol id, if the machine has one.

    Returns:
        tuple: (anchor symbol, run length, wild count)
    """
    symbol = _anchor_symbol(line, wild_id)
    combo = 0
    wild_count = 0
    for s in line:
        if wild_id is not None and s == wild_id:
            wild_count += 1
            combo += 1
            continue
        if s != symbol:
            break
        combo += 1
    return symbol, combo, wild_count


def get_unit_prize(prize_table, symbol, combo):
    """Prize multiplier for ``combo`` consecutive ``symbol``; 0 when the table has no entry."""
    prizes = prize_table.get(symbol)
    if not prizes or combo < 1 or combo > len(prizes):
        return 0
    return prizes[combo - 1] or 0


def _carried_multiplier(storage):
    if storage is None or storage.free_spin is None:
        return 1
    return storage.free_spin.multiplier


def execute(max_lines, bet_per_line, config, grid, filled_mask, storage=None):
    """
    Pays out every payline of a filled grid and digests the storage for the next spin.

    Only lines with an index below ``max_lines`` can pay. The multiplier applied
    is the one carried in ``storage``, i.e. the one rolled by the previous spin.

    Args:
        max_lines (int): Number of paylines the player is playing.
        bet_per_line (int | float): Stake on each payline.
        config (MachineConfig): The machine definition.
        grid (Grid): This spin's grid.
        filled_mask (list[list[int]]): Output of ``mask`` for ``grid``.
        storage (Storage, optional): State persisted by the previous spin.

    Returns:
        SpinResult: Total prize, paying lines and the storage to persist.
    """
    result = SpinResult()
    wild_id = config.wild_index
    multiplier = _carried_multiplier(storage)

    for i, line in enumerate(filled_mask):
        symbol, combo, wild_count = evaluate_line(line, wild_id)
        unit_prize = get_unit_prize(config.prize_table, symbol, combo)
        prize = bet_per_line * unit_prize if i < max_lines else 0
        if prize:
            line_prize = prize * multiplier
            result.prize += line_prize
            result.lines.append(LineWin(index=i, combo=combo, prize=line_prize, wc=wild_count, ss=list(line)))

    result.exit_storage = digest(storage, grid)
    return result


def digest(prev_storage: Optional[Storage], grid: Optional[Grid]) -> Storage:
    """
    Builds the storage to persist after a spin.

    One owed free spin is consumed if any were owed going in, and the spins
    awarded by this grid are added. Multiplier and scatter count come from this
    grid, so a multiplier won now applies from the next spin onward. The total
    is not floored at zero.

    Args:
        prev_storage (Storage | None): Storage the spin started with.
        grid (Grid | None): The grid drawn by the spin.

    Returns:
        Storage: A new storage value; ``prev_storage`` is left untouched.
    """
    incoming = grid.free_spin.total if grid is not None else 0
    current = 0
    if prev_storage is not None and prev_storage.free_spin is not None:
        current = prev_storage.free_spin.total
    consumed = 1 if current > 0 else 0

    return Storage(free_spin=FreeSpinState(
        multiplier=grid.free_spin.multiplier if grid is not None else 1,
        symbols=grid.free_spin.symbols if grid is not None else 0,
        total=current + incoming - consumed,
    ))


def spin(max_lines: int, bet_per_line, config: MachineConfig, cache: List[int],
         storage: Optional[Storage] = None, rng: Optional[Callable[[int], int]] = None) -> SpinResult:
    """
    Plays one spin: draw the grid, read the paylines, pay them out.

    Raises:
        SelectionError: If the weight cache does not match the machine's reels.
            No partial result is produced.
    """
    try:
        grid = generate_grid(config, cache, rng)
    except SelectionError as e:
        logger.error("Spin aborted, machine '%s' has inconsistent reel weights: %s",
                     config.name or 'unnamed', e.status_message)
        raise
    filled_mask = mask(config, grid)
    return execute(max_lines, bet_per_line, config, grid, filled_mask, storage)


def distribute(arr, minimum, maximum):
    """
    Spreads evenly spaced values over each row of ``arr``.

    Row ``i`` of ``n`` covers ``(maximum - minimum) / n * (i + 1)`` split into
    ``len(row)`` equal steps starting at 0. Returns a new list.
    """
    value_range = maximum - minimum
    rows = []
    for i, row in enumerate(arr):
        inner_max = (value_range / len(arr)) * (i + 1)
        step = inner_max / len(row) if row else 0
        rows.append([j * step for j in range(len(row))])
    return rows
