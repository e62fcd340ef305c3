from ..models import Bucket


def bucket_for(value) -> Bucket:
    """
    (year, month) folder key for any date-like value (datetime, date).
    Day and time of day are ignored.
    """
    return Bucket(value.year, value.month)
