"""Voice appointment booking: spoken date/time -> calendar window -> booking."""
