"""Calibration, transform and overlay projection for the tactical map."""
