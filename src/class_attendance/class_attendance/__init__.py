"""Class attendance package.

Feature modules (groups, schedules, attendance) each follow the same shape:
a frozen-dataclass model, a repository Protocol with a MySQL implementation,
a service holding the business rules and a thin Flask controller.
"""
