"""Properties app package.

Properties are the bookable resources of the scheduling engine. This app
owns the per-property scheduling profile (timezone, default check-in and
check-out times, maintenance buffer) that the availability app consumes.
"""
