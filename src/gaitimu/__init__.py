"""GaitIMU: six-axis IMU acquisition, rate estimation and CSV logging.

The sensor hub delivers accelerometer and gyroscope events, the
:class:`~gaitimu.core.merger.SensorStreamMerger` fuses them into
:class:`~gaitimu.core.models.ImuSample` values, and the recording session
fans each sample out to the CSV logger and the sample-rate estimator.
"""

__version__ = "0.1.0"
