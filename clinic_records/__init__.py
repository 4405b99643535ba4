"""Clinic records: doctors, patients, pharmacists, drugs and prescriptions."""

__version__ = "0.1.0"
