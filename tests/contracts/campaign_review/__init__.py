# Campaign Review Service Contracts

"""
Campaign Review Service Contract Module

This module contains:
- data_contract.py: re-exported service models and the test data factory
"""
