from labbooker.utils.timewindow import to_naive_utc


def normalize_timestamp(value):
    """Timestamps are stored as naive UTC; aware inputs are converted first."""
    if value is None:
        return value
    return to_naive_utc(value)
