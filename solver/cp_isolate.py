# solver/cp_isolate.py
import multiprocessing as mp
from typing import List, Optional, Sequence, Tuple
import traceback

from models import UNDETERMINED, Placement


# Worker must be top-level (picklable on Windows spawn)
def _solve_worker(q, W: int, H: int, placements, counts, max_seconds: float):
    try:
        from solver.cp_sat import try_pack_cp_sat  # import inside child
        status, witness, reason = try_pack_cp_sat(W, H, placements, counts, max_seconds)
        q.put(("ok", status, witness, reason))
    except MemoryError:
        q.put(("err", UNDETERMINED, [], "Child ran out of memory"))
    except Exception as e:
        q.put(("exc", UNDETERMINED, [], f"{e}\n{traceback.format_exc()}"))


def run_cp_sat_isolated(
    W: int,
    H: int,
    placements: Sequence[Sequence[Placement]],
    counts: Sequence[int],
    max_seconds: float,
) -> Tuple[str, List[Placement], str, Optional[str]]:
    """
    Returns (status, witness, reason, crash_note).
    crash_note is non-empty only if the child crashed/was killed/timed out.
    """
    ctx = mp.get_context("spawn")
    q = ctx.Queue()
    p = ctx.Process(
        target=_solve_worker,
        args=(q, W, H, [list(opts) for opts in placements], list(counts), float(max_seconds)),
    )
    p.daemon = True
    p.start()

    # Allow a small buffer beyond model time for teardown
    timeout = float(max_seconds) + 5.0
    try:
        tag, status, witness, reason = q.get(timeout=timeout)
    except Exception:
        tag = None
    p.join(2.0)

    if tag is None:
        if p.is_alive():
            p.terminate()
            p.join(2.0)
            return UNDETERMINED, [], "Stopped before verdict (timebox)", "killed: timeout"
        return UNDETERMINED, [], f"No result from child process (exit {p.exitcode})", "child crashed"

    return status, witness, reason, None
