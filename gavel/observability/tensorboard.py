"""
TensorBoard logging helpers for auction rollouts.

Provides a thin wrapper around tensorboardX.SummaryWriter that understands
SessionState snapshots, rival arenas and rollout summaries so experiments
can emit auction telemetry with minimal wiring.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, MutableMapping, TYPE_CHECKING

import numpy as np

try:
    from tensorboardX import SummaryWriter
except ImportError as exc:  # pragma: no cover - dependency enforced in pyproject
    raise RuntimeError(
        "tensorboardX is required for TensorBoard logging. "
        "Add tensorboardX to your environment."
    ) from exc

if TYPE_CHECKING:
    from ..experiments.eval import AuctionRollout
    from ..house.protocols import Arena
    from ..house.types import SessionState


def _ensure_path(path: str | Path) -> Path:
    target = Path(path).expanduser()
    target.mkdir(parents=True, exist_ok=True)
    return target


class TensorBoardLogger:
    """Auction-aware TensorBoard logger.

    Args:
        log_dir: Base directory for TensorBoard runs.
        run_name: Optional subdirectory name; defaults to UTC timestamp.
        flush_secs: How often to flush data to disk.
    """

    def __init__(self, log_dir: str | Path, run_name: str | None = None, flush_secs: int = 10):
        base = _ensure_path(log_dir)
        self._run_name = run_name or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.log_dir = _ensure_path(base / self._run_name)
        self.writer = SummaryWriter(logdir=str(self.log_dir), flush_secs=flush_secs)
        self._drops: MutableMapping[str, int] = defaultdict(int)
        self._event_counts: MutableMapping[str, int] = defaultdict(int)
        self._event_step = 0

    def log_auction_turn(self, step: int, state: "SessionState", arena: "Arena | None" = None,
                         tag: str | None = None) -> None:
        """Log price, rival count and (if an arena is given) hidden rival pressure."""
        base = tag or "auction"
        scalars: Mapping[str, float] = {
            "price": float(state.current_price),
            "price_to_market": float(state.current_price) / max(1, state.market_value),
            "active_rivals": float(state.n_active),
            "withdrawn_rivals": float(len(state.withdrawn_rival_ids)),
            "player_leading": float(state.player_leading),
            "power_bid_streak": float(state.power_bid_streak),
        }
        for name, value in scalars.items():
            self.writer.add_scalar(f"{base}/{name}", value, step)

        if len(state.withdrawn_rival_ids) > self._drops[base]:
            self._drops[base] = len(state.withdrawn_rival_ids)
            self.writer.add_scalar(f"{base}/drops", float(self._drops[base]), step)

        if arena is None or not state.active_rival_ids:
            return
        patience = np.asarray([arena[r].patience for r in state.active_rival_ids], dtype=np.float32)
        budget = np.asarray([arena[r].budget for r in state.active_rival_ids], dtype=np.float32)
        self.writer.add_scalar(f"{base}/rivals/patience_mean", float(np.mean(patience)), step)
        self.writer.add_scalar(f"{base}/rivals/patience_min", float(np.min(patience)), step)
        self.writer.add_scalar(f"{base}/rivals/budget_headroom",
                               float(np.max(budget)) - state.current_price, step)

    def log_rollout_summary(self, rollout: "AuctionRollout", tag: str | None = None) -> None:
        """Log settlement figures after one auction."""
        base = (tag or "auction") + "/summary"
        turns = rollout.turns
        self.writer.add_scalar(f"{base}/final_price", float(rollout.final_price), turns)
        self.writer.add_scalar(f"{base}/player_won", float(rollout.player_won), turns)
        self.writer.add_scalar(f"{base}/surplus", float(rollout.surplus), turns)
        self.writer.add_scalar(f"{base}/rejected_actions", float(rollout.rejected_actions), turns)

    def record(self, event: str, payload: Mapping[str, Any]) -> None:
        """Structured-logger hook, so the logger can be registered with use_logger.

        Keeps a running count per engine event and the price carried by the event, if any.
        """
        self._event_counts[event] += 1
        self.writer.add_scalar(f"events/{event}", float(self._event_counts[event]), self._event_step)
        price = payload.get("price", payload.get("current_price"))
        if price is not None:
            self.writer.add_scalar("events/price", float(price), self._event_step)
        self._event_step += 1

    def log_policy_summary(self, name: str, stats: Mapping[str, float], step: int | None = None,
                           prefix: str = "policies") -> None:
        """Log aggregated policy comparison statistics."""
        base = f"{prefix}/{name}"
        final_step = step if step is not None else 0
        for key, value in stats.items():
            self.writer.add_scalar(f"{base}/{key}", float(value), final_step)

    def flush(self) -> None:
        self.writer.flush()

    def close(self) -> None:
        self.writer.close()

    def __enter__(self) -> "TensorBoardLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def create_logger(log_dir: str | Path, run_name: str | None = None, flush_secs: int = 10) -> TensorBoardLogger:
    """Factory helper mirroring TensorBoardLogger constructor."""
    return TensorBoardLogger(log_dir=log_dir, run_name=run_name, flush_secs=flush_secs)
