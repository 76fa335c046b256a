# src/core/state_manager.py
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.logger_setup import get_logger

logger = get_logger(__name__)

DEFAULT_STATE_FILE = "condense_state.json"


class RunStateManager:
    """
    Tracks the status of each run and of each candidate within it.

    With a state directory the state is written to JSON after every
    transition, so the id of a run that crashed mid-way can be found (and its
    artifacts purged) later. Without one, state lives in memory only.
    """

    def __init__(self, state_dir: Optional[str] = None, state_filename: str = DEFAULT_STATE_FILE):
        """
        Initializes the RunStateManager.

        Args:
            state_dir (Optional[str]): Directory of the state file. None keeps state in memory.
            state_filename (str): The name of the state file.
        """
        self.state_dir = Path(state_dir).resolve() if state_dir else None
        self.state_file_path = self.state_dir / state_filename if self.state_dir else None
        self.state: Dict[str, Any] = self._load_state()
        logger.debug(f"RunStateManager initialized. State file: {self.state_file_path or 'in-memory'}")

    def _load_state(self) -> Dict[str, Any]:
        """Loads the state file if present, otherwise starts empty."""
        if self.state_file_path and self.state_file_path.exists():
            try:
                with open(self.state_file_path, 'r', encoding='utf-8') as f:
                    state = json.load(f)
                if 'runs' not in state: state['runs'] = {}
                logger.info(f"Loaded existing run state from {self.state_file_path}")
                return state
            except (json.JSONDecodeError, IOError) as e:
                logger.error(f"Failed to load state file {self.state_file_path}: {e}. Initializing new state.", exc_info=True)
        return self._initialize_state()

    def _initialize_state(self) -> Dict[str, Any]:
        return {"runs": {}}

    def save_state(self):
        """Writes the state to the state file. No-op without a state directory."""
        if self.state_file_path is None:
            return
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            with open(self.state_file_path, 'w', encoding='utf-8') as f:
                json.dump(self.state, f, indent=4)
            logger.debug(f"Saved state to {self.state_file_path}")
        except (IOError, TypeError) as e:
            logger.error(f"Failed to save state to {self.state_file_path}: {e}", exc_info=True)

    def get_state(self) -> Dict[str, Any]:
        """Returns the current state dictionary."""
        return self.state

    # --- Run lifecycle ---

    def start_run(self, run_id: str, graph_handle: str, candidates: List[str], requested: Optional[List[str]] = None):
        """
        Registers a run with every candidate pending.

        Args:
            run_id (str): The new run.
            graph_handle (str): Graph the run works on.
            candidates (List[str]): Candidates to evaluate, each once.
            requested (Optional[List[str]]): Names as the caller requested them, repeats included.
                                             Defaults to candidates.
        """
        self.state['runs'][run_id] = {
            'graph_handle': graph_handle,
            'requested': list(requested if requested is not None else candidates),
            'status': 'running',
            'started_at': datetime.now(timezone.utc).isoformat(),
            'candidates': {name: {'status': 'pending', 'score': None, 'error': None} for name in candidates},
            'winner': None,
            'last_error': None,
        }
        logger.debug(f"Run {run_id} registered with candidates {candidates}")
        self.save_state()

    def update_candidate(self, run_id: str, candidate: str, status: str, score: Optional[float] = None, error: Optional[str] = None):
        """
        Records a candidate transition.

        Args:
            run_id (str): The run the candidate belongs to.
            candidate (str): The candidate label.
            status (str): New status (pending, building, scored, failed).
            score (Optional[float]): The score, once known. Infinite scores are stored as None.
            error (Optional[str]): Failure message. Cleared when None.
        """
        run = self.state['runs'].get(run_id)
        if run is None:
            logger.warning(f"Run '{run_id}' not found in state. Ignoring update for candidate '{candidate}'.")
            return
        entry = run['candidates'].setdefault(candidate, {})
        entry['status'] = status
        # JSON has no infinity
        entry['score'] = score if score is not None and score != float('inf') else None
        entry['error'] = error
        logger.debug(f"Run {run_id}: candidate '{candidate}' -> {status}")
        self.save_state()

    def finish_run(self, run_id: str, status: str, winner: Optional[str] = None, error: Optional[str] = None):
        """Marks a run completed or failed."""
        run = self.state['runs'].get(run_id)
        if run is None:
            logger.warning(f"Run '{run_id}' not found in state. Cannot mark it '{status}'.")
            return
        run['status'] = status
        run['winner'] = winner
        run['last_error'] = error
        run['finished_at'] = datetime.now(timezone.utc).isoformat()
        self.save_state()

    def mark_purged(self, run_id: str):
        """Notes that a run's artifacts were removed from the store."""
        run = self.state['runs'].get(run_id)
        if run is not None:
            run['purged'] = True
            self.save_state()

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        """Retrieves the state of one run."""
        return self.state['runs'].get(run_id)

    def get_incomplete_runs(self) -> List[str]:
        """Run ids that never reached a final status, e.g. because the process crashed."""
        return [run_id for run_id, run in self.state['runs'].items()
                if run.get('status') == 'running' and not run.get('purged')]
