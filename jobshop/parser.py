"""Instance loading for the JSPLIB / Taillard text format.

Format::

    # optional comment lines
    J M
    m d m d ...   (one line per job, M pairs machine/duration)

Machine indices are 0-based; a file using exactly ``1..M`` is shifted to
0-based.
"""

import os

from jobshop.models import DataInstance


def parse_jsplib_data(file_path: str) -> DataInstance:
    """Parse one instance file.

    Raises:
        ValueError: On a bad header, missing job lines, an odd token count,
            a non-positive duration or a machine index out of range.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    lines = [line for line in lines if line and not line.startswith("#")]
    if not lines:
        raise ValueError(f"Empty instance file: {file_path}")

    header = lines[0].split()
    if len(header) != 2:
        raise ValueError(f"Invalid header (expected 'jobs machines'): {lines[0]!r}")
    try:
        jobs_number, machines_number = map(int, header)
    except ValueError:
        raise ValueError(f"Invalid header (expected two integers): {lines[0]!r}") from None
    if jobs_number <= 0 or machines_number <= 0:
        raise ValueError("Header values must be positive")
    if len(lines) - 1 < jobs_number:
        raise ValueError(f"Expected {jobs_number} job lines, found {len(lines) - 1}")

    raw_jobs: list[list[tuple[int, int]]] = []
    for j, line in enumerate(lines[1 : jobs_number + 1]):
        tokens = list(map(int, line.split()))
        if len(tokens) != 2 * machines_number:
            raise ValueError(
                f"Job {j}: expected {2 * machines_number} tokens, got {len(tokens)}"
            )
        ops = list(zip(tokens[0::2], tokens[1::2]))
        for machine, duration in ops:
            if duration <= 0:
                raise ValueError(f"Job {j}: non-positive processing time {duration}")
        raw_jobs.append(ops)

    machines = {m for ops in raw_jobs for (m, _) in ops}
    one_based = 0 not in machines and machines <= set(range(1, machines_number + 1))
    shift = 1 if one_based else 0
    jobs = [[(m - shift, d) for (m, d) in ops] for ops in raw_jobs]
    for j, ops in enumerate(jobs):
        for m, _ in ops:
            if not (0 <= m < machines_number):
                raise ValueError(f"Job {j}: machine index out of range: {m + shift}")

    return DataInstance(jobs=jobs, jobs_number=jobs_number, machines_number=machines_number)


def load_instance(path: str) -> DataInstance:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Instance file not found: {path}")
    return parse_jsplib_data(path)


def list_instance_files(path: str) -> list[str]:
    """Return ``[path]`` for a file or the sorted visible files of a directory."""
    if os.path.isdir(path):
        return sorted(
            os.path.join(path, f)
            for f in os.listdir(path)
            if not f.startswith(".") and os.path.isfile(os.path.join(path, f))
        )
    return [path]
