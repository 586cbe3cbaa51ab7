import logging

import numpy as np

from reelspin.utils.random_source import RandomSource
from reelspin.utils.spin_handler import spin

logger = logging.getLogger(__name__)


class SlotTester:
    """
    Chains spins on one machine and collects return-to-player statistics.

    Every spin's ``exit_storage`` is fed into the next spin, so free spins and
    their delayed multipliers play out exactly as they would for a player. A spin
    that starts with free spins owed wagers nothing.
    """

    def __init__(self, config, cache, num_spins, max_lines, bet_per_line, rng=None):
        self.config = config
        self.cache = cache
        self.num_spins = num_spins
        self.max_lines = max_lines
        self.bet_per_line = bet_per_line
        self.rng = rng if rng is not None else RandomSource()

        self.storage = None
        self.spins_played = 0

        # Statistics to be collected
        self.total_bet = 0
        self.total_win = 0
        self.hit_count = 0
        self.free_spin_triggers = 0
        self.free_spins_played = 0
        self.free_spin_win = 0
        self.wins_per_spin = []
        self.wins_by_multiplier = {}
        self.rtp_over_time = []

    @property
    def bet_per_spin(self):
        return self.bet_per_line * min(self.max_lines, len(self.config.lines))

    def run_simulation(self):
        logger.info(f"Starting simulation for {self.config.name} with {self.num_spins} spins "
                    f"at {self.bet_per_line} per line on {self.max_lines} lines.")
        interval = self.num_spins // 20 or 1 # ~20 RTP data points
        for i in range(self.num_spins):
            self._simulate_one_spin()
            if (i + 1) % interval == 0 or (i + 1) == self.num_spins:
                self.rtp_over_time.append({'spin_count': i + 1, 'rtp': self._rtp()})
        logger.info(f"Simulation finished for {self.config.name}.")
        return self.summary()

    def _simulate_one_spin(self):
        entry_free_spin = self.storage.free_spin if self.storage is not None else None
        is_free_spin = entry_free_spin is not None and entry_free_spin.total > 0
        actual_bet = 0 if is_free_spin else self.bet_per_spin

        result = spin(self.max_lines, self.bet_per_line, self.config, self.cache, self.storage, self.rng)
        self.storage = result.exit_storage
        self.spins_played += 1
        self._collect_spin_statistics(result, actual_bet, is_free_spin, entry_free_spin)
        return result

    def _collect_spin_statistics(self, result, actual_bet, is_free_spin, entry_free_spin):
        self.total_bet += actual_bet
        self.total_win += result.prize
        self.wins_per_spin.append(result.prize)

        if result.prize > 0:
            self.hit_count += 1

        if is_free_spin:
            self.free_spins_played += 1
            self.free_spin_win += result.prize

        # A trigger is a grid that awarded spins, i.e. the owed total grew beyond
        # what consuming one spin explains.
        owed_before = entry_free_spin.total if entry_free_spin is not None else 0
        consumed = 1 if owed_before > 0 else 0
        if result.exit_storage.free_spin.total > owed_before - consumed:
            self.free_spin_triggers += 1

        if self.bet_per_spin > 0:
            multiplier_category = round(result.prize / self.bet_per_spin)
            self.wins_by_multiplier[multiplier_category] = self.wins_by_multiplier.get(multiplier_category, 0) + 1

    def _rtp(self):
        return (self.total_win / self.total_bet) * 100 if self.total_bet > 0 else 0

    def volatility_index(self):
        """Standard deviation of per-spin wins in units of the bet per spin."""
        if not self.wins_per_spin or self.bet_per_spin <= 0:
            return 0.0
        return float(np.std(np.asarray(self.wins_per_spin, dtype=float)) / self.bet_per_spin)

    def summary(self):
        spins = self.spins_played
        base_game_win = self.total_win - self.free_spin_win
        return {
            'machine': self.config.name,
            'spins': spins,
            'bet_per_spin': self.bet_per_spin,
            'total_bet': self.total_bet,
            'total_win': self.total_win,
            'rtp': self._rtp(),
            'hit_frequency': (self.hit_count / spins) * 100 if spins > 0 else 0,
            'free_spin_triggers': self.free_spin_triggers,
            'free_spin_frequency': (self.free_spin_triggers / spins) * 100 if spins > 0 else 0,
            'free_spins_played': self.free_spins_played,
            'base_game_rtp_contribution': (base_game_win / self.total_bet) * 100 if self.total_bet > 0 else 0,
            'free_spin_rtp_contribution': (self.free_spin_win / self.total_bet) * 100 if self.total_bet > 0 else 0,
            'volatility_index': self.volatility_index(),
            'wins_by_multiplier': dict(sorted(self.wins_by_multiplier.items())),
            'rtp_over_time': list(self.rtp_over_time),
        }

    def print_summary_statistics(self, echo=print):
        stats = self.summary()
        echo("\n--- Simulation Summary ---")
        echo(f"Machine: {stats['machine']}")
        echo(f"Total Spins Simulated: {stats['spins']}")
        echo(f"Bet Per Spin: {stats['bet_per_spin']}")
        echo(f"Total Wagered: {stats['total_bet']}")
        echo(f"Total Won: {stats['total_win']}")

        echo("\n--- Detailed Metrics ---")
        echo(f"Overall RTP: {stats['rtp']:.2f}%")
        echo(f"Hit Frequency: {stats['hit_frequency']:.2f}%")
        echo(f"Free Spin Trigger Frequency: {stats['free_spin_frequency']:.2f}% "
             f"({stats['free_spin_triggers']} triggers, {stats['free_spins_played']} free spins played)")
        echo(f"Base Game RTP Contribution: {stats['base_game_rtp_contribution']:.2f}%")
        echo(f"Free Spin RTP Contribution: {stats['free_spin_rtp_contribution']:.2f}%")
        echo(f"Volatility Index (Win StdDev / Bet): {stats['volatility_index']:.2f}")

        echo("\nWin Distribution (by Bet Multiplier):")
        if stats['wins_by_multiplier']:
            for mult, count in stats['wins_by_multiplier'].items():
                echo(f"  {mult}x Bet: {count} times ({(count / stats['spins']) * 100:.2f}%)")
        else:
            echo("  No win data to display for multiplier distribution.")
