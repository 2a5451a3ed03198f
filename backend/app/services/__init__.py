"""
Business logic services package.

WHY: Services contain business logic separated from API routes and data access,
following the three-layer architecture (API → Service → DAO). Every proposal
mutation goes through ProposalService so the linked deal is always revalued.
"""
