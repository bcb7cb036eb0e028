"""Feature packages: reminders, push delivery, client notifications and health."""
