"""
Background Tasks Package

- maintenance_tasks: ledger reconciliation and tenant deletion cleanup
"""

from shopcore.tasks.maintenance_tasks import *
