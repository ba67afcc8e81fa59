"""
Runtime services owned by the application shell: clocks and change subscriptions.
"""
