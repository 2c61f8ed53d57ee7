"""
Sampling and output of Bjorken flow observables.

A sample is a proper time plus a mapping from observable name to value.
Recorders receive samples through a single interface; the file recorder
writes one two-column text file per observable.
"""

from abc import ABC, abstractmethod
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

import numpy as np

from ..core.fields import FluidState
from .logging_config import get_logger

logger = get_logger("output")

# Observable name -> column label
OBSERVABLE_LABELS: dict[str, str] = {
    "energy_density": "e/e0",
    "shear_stress": "pi [fm^-4]",
    "bulk_pressure": "Pi [fm^-4]",
    "pressure_ratio": "PL/PT",
    "shear_inverse_reynolds": "R_pi^-1",
    "bulk_inverse_reynolds": "R_Pi^-1",
    "shear_relaxation_time": "tau_pi [fm]",
    "bulk_relaxation_time": "tau_Pi [fm]",
    "quasiparticle_bag": "B [fm^-4]",
    "quasiparticle_bag_correction": "dB_2nd [fm^-4]",
    "shear_navier_stokes_inverse_reynolds": "R_piNS^-1",
    "bulk_navier_stokes_inverse_reynolds": "R_PiNS^-1",
}


@dataclass(frozen=True)
class SampleRecord:
    """Observables of one fluid state."""

    tau: float
    values: dict[str, float] = field(default_factory=dict)


def sample_observables(state: FluidState, reference_energy_density: float) -> SampleRecord:
    """
    Derived observables of a fluid state.

    Args:
        state: Fully synchronised fluid state
        reference_energy_density: e0 used to normalise the energy density

    Returns:
        SampleRecord keyed by the names in OBSERVABLE_LABELS
    """
    p, pi, Pi = state.p, state.pi, state.Pi
    transport = state.transport
    shear_norm = np.sqrt(1.5)

    values = {
        "energy_density": state.e / reference_energy_density,
        "shear_stress": pi,
        "bulk_pressure": Pi,
        "pressure_ratio": state.longitudinal_pressure / state.transverse_pressure,
        "shear_inverse_reynolds": shear_norm * pi / p,
        "bulk_inverse_reynolds": Pi / p,
        "shear_relaxation_time": transport.taupi,
        "bulk_relaxation_time": transport.taubulk,
        "quasiparticle_bag": transport.B,
        "quasiparticle_bag_correction": transport.dB2nd,
        "shear_navier_stokes_inverse_reynolds": shear_norm * transport.piNS / p,
        "bulk_navier_stokes_inverse_reynolds": transport.bulkNS / p,
    }
    return SampleRecord(tau=state.tau, values={k: float(v) for k, v in values.items()})


class Recorder(ABC):
    """
    Sink for sampled observables.

    Usable as a context manager; close() must be safe to call more than once.
    """

    @abstractmethod
    def open(self) -> None:
        pass

    @abstractmethod
    def record(self, sample: SampleRecord) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        pass

    def __enter__(self) -> "Recorder":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class MemoryRecorder(Recorder):
    """Keeps samples in memory."""

    def __init__(self) -> None:
        self.samples: list[SampleRecord] = []
        self._closed = False

    def open(self) -> None:
        self._closed = False

    def record(self, sample: SampleRecord) -> None:
        if self._closed:
            raise RuntimeError("Cannot record to a closed recorder")
        self.samples.append(sample)

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def times(self) -> np.ndarray:
        return np.array([sample.tau for sample in self.samples])

    def as_arrays(self) -> dict[str, np.ndarray]:
        """Samples as arrays keyed by observable name, plus 'tau'."""
        arrays = {"tau": self.times}
        if self.samples:
            for name in self.samples[0].values:
                arrays[name] = np.array([sample.values[name] for sample in self.samples])
        return arrays

    def __len__(self) -> int:
        return len(self.samples)


class DatFileRecorder(Recorder):
    """
    Writes one '<name>.dat' file per observable.

    Each file starts with the header 'tau [fm]<TAB><TAB><label>' followed by
    rows 'tau<TAB><TAB>value' at six significant digits.
    """

    def __init__(self, directory: Path | str, observables: list[str] | None = None):
        self.directory = Path(directory)
        self.observables = list(observables) if observables is not None else list(OBSERVABLE_LABELS)
        unknown = set(self.observables) - set(OBSERVABLE_LABELS)
        if unknown:
            raise ValueError(f"Unknown observables: {sorted(unknown)}")
        self._handles: dict[str, IO[str]] = {}

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.dat"

    def open(self) -> None:
        if self._handles:
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        try:
            for name in self.observables:
                handle = self.path_for(name).open("w")
                self._handles[name] = handle
                handle.write(f"tau [fm]\t\t{OBSERVABLE_LABELS[name]}\n")
        except OSError:
            self.close()
            raise
        logger.info(f"Writing {len(self.observables)} observables to {self.directory}")

    def record(self, sample: SampleRecord) -> None:
        if not self._handles:
            raise RuntimeError("DatFileRecorder must be opened before recording")
        for name, handle in self._handles.items():
            handle.write(f"{sample.tau:.6g}\t\t{sample.values[name]:.6g}\n")

    def close(self) -> None:
        handles, self._handles = self._handles, {}
        with ExitStack() as stack:
            for handle in handles.values():
                stack.callback(handle.close)

    @property
    def closed(self) -> bool:
        return not self._handles


class CompositeRecorder(Recorder):
    """Fans every sample out to several recorders."""

    def __init__(self, recorders: list[Recorder]):
        self.recorders = list(recorders)

    def open(self) -> None:
        for recorder in self.recorders:
            recorder.open()

    def record(self, sample: SampleRecord) -> None:
        for recorder in self.recorders:
            recorder.record(sample)

    def close(self) -> None:
        # Every recorder is closed even if one of them fails
        with ExitStack() as stack:
            for recorder in self.recorders:
                stack.callback(recorder.close)

    @property
    def closed(self) -> bool:
        return all(recorder.closed for recorder in self.recorders)
