"""Developer and offline-review tools.

- :mod:`debug` exposes opt-in timing instrumentation (``GAITIMU_DEBUG=1``).
- :mod:`plotter` draws a recorded CSV with Matplotlib.
"""
