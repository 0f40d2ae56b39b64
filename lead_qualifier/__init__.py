"""Adaptive lead qualification service."""
