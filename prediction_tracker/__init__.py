"""Polls an inference provider and a spot-price provider for the same asset,
reconciles both series and keeps a bounded durable prediction history."""

__version__ = "0.1.0"
