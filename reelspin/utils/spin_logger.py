"""
Spin Event Logging
Audit records for every spin and simulation run
"""

import json
import logging
from datetime import datetime, timezone

from flask import g, has_request_context

event_logger = logging.getLogger('reelspin.events')


def _request_id():
    return g.get('request_id', 'N/A') if has_request_context() else 'N/A'


class SpinLogger:
    """Centralized game event logging"""

    @staticmethod
    def log_spin_event(machine: str, max_lines: int, bet_per_line, result, storage=None, details: dict = None):
        """Log the outcome of one spin together with the free spin state going in and out"""
        entry_free_spin = storage.free_spin if storage is not None else None
        exit_free_spin = result.exit_storage.free_spin

        event_data = {
            'event_type': 'game',
            'sub_type': 'spin',
            'machine': machine,
            'max_lines': max_lines,
            'bet_per_line': bet_per_line,
            'prize': result.prize,
            'winning_lines': [line.index for line in result.lines],
            'free_spins_owed_before': entry_free_spin.total if entry_free_spin is not None else 0,
            'multiplier_applied': entry_free_spin.multiplier if entry_free_spin is not None else 1,
            'free_spins_owed_after': exit_free_spin.total if exit_free_spin is not None else 0,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'request_id': _request_id(),
            'details': details or {}
        }

        event_logger.info(f"SPIN_EVENT: {json.dumps(event_data)}")

    @staticmethod
    def log_simulation_event(machine: str, summary: dict, seed=None):
        """Log a completed simulation run"""
        event_data = {
            'event_type': 'game',
            'sub_type': 'simulation',
            'machine': machine,
            'seed': seed,
            'summary': summary,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'request_id': _request_id()
        }

        event_logger.info(f"SIMULATION_EVENT: {json.dumps(event_data)}")
