# applications/signals.py
from django.dispatch import Signal

# Sent after a status transition has been written.
# kwargs: application, old_status, new_status, caller
application_status_changed = Signal()
