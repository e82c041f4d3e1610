"""Tracker for new LCO amendments published by the Connecticut General Assembly."""
