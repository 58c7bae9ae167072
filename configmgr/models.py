from django.db import models

class SystemSetting(models.Model):
    """
    Simple key/value settings store, read at request time.
    Example keys (override settings.BOOKING):
      - SLOT_INTERVAL_MINUTES (e.g., '30')
      - CANCELLATION_CUTOFF_MINUTES (e.g., '240')
    """
    key = models.CharField(max_length=100, unique=True)
    value = models.CharField(max_length=200)

    def __str__(self):
        return f"{self.key}={self.value}"
