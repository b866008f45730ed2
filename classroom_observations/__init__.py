"""Classroom observations API."""
