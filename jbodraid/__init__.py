"""A linear byte address space over a simulated in-memory sixteen-disk JBOD array."""

__version__ = "0.1.0"

__all__ = ["jbod", "mdadm", "util", "workload"]