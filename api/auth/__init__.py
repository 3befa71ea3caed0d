"""
Admin authentication: login and the bearer-token gate for mutating routes.
"""
