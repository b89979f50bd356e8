"""
Device discovery for the PyTorch backend.

Level-3 operands are float64 or complex128, so a GPU is only usable if it
runs double-precision kernels. detect_gpu() reports the GPU PyTorch can see
together with that property; select_device() turns a backend preference
into a concrete device. The CPU reference backend needs none of this.
"""

from dataclasses import dataclass
from typing import Literal
import platform


@dataclass(frozen=True)
class DeviceInfo:
    """
    A device a backend can run on.

    Attributes:
        kind: 'cpu', 'cuda' or 'mps'
        index: Device ordinal (None for the host)
        name: Human-readable device name
        memory_bytes: Total device memory, None if unknown
        supports_fp64: Whether float64/complex128 kernels are available
    """
    kind: Literal['cpu', 'cuda', 'mps']
    index: int | None
    name: str
    memory_bytes: int | None = None
    supports_fp64: bool = True

    @property
    def is_gpu(self) -> bool:
        return self.kind != 'cpu'

    @property
    def torch_device(self) -> str:
        """Device string accepted by torch.device() and TorchBackend."""
        if self.kind == 'cuda':
            return f"cuda:{self.index}"
        return self.kind

    def __str__(self) -> str:
        if not self.is_gpu:
            return f"CPU ({self.name})"
        label = f"{self.kind.upper()}:{self.index} ({self.name}"
        if self.memory_bytes is not None:
            label += f", {self.memory_bytes / 1024**3:.1f}GB"
        return label + ")"


def host_device() -> DeviceInfo:
    """The host CPU."""
    name = platform.processor() or platform.machine() or "unknown"
    return DeviceInfo(kind='cpu', index=None, name=name)


def detect_gpu() -> DeviceInfo | None:
    """
    The GPU PyTorch would use, or None.

    CUDA is preferred over MPS. torch is imported lazily and its absence
    simply means no GPU.
    """
    try:
        import torch
    except ImportError:
        return None

    if torch.cuda.is_available():
        idx = torch.cuda.current_device()
        props = torch.cuda.get_device_properties(idx)
        return DeviceInfo(kind='cuda', index=idx, name=props.name,
                          memory_bytes=props.total_memory)

    mps = getattr(torch.backends, 'mps', None)
    if mps is not None and mps.is_available():
        # MPS has no double precision
        return DeviceInfo(kind='mps', index=0, name='Apple Silicon GPU',
                          supports_fp64=False)

    return None


def select_device(prefer: Literal['cpu', 'gpu', 'auto'] = 'auto') -> DeviceInfo:
    """
    Resolve a device preference for double-precision Level-3 work.

    Args:
        prefer: 'cpu' for the host, 'gpu' to require an fp64-capable GPU,
            'auto' for such a GPU when present and the host otherwise

    Raises:
        RuntimeError: If 'gpu' is requested and no fp64-capable GPU exists
        ValueError: If prefer is not one of the above
    """
    if prefer not in ('cpu', 'gpu', 'auto'):
        raise ValueError(f"Unknown device preference: {prefer!r}")
    if prefer == 'cpu':
        return host_device()

    gpu = detect_gpu()
    if gpu is not None and gpu.supports_fp64:
        return gpu
    if prefer == 'auto':
        return host_device()

    if gpu is None:
        raise RuntimeError(
            "GPU requested but no GPU available. "
            "Install PyTorch with CUDA support, or use backend='cpu'."
        )
    raise RuntimeError(
        f"GPU requested but {gpu} has no float64 support. "
        f"Level-3 operations run in double precision; use backend='cpu'."
    )
