"""Authentication and authorization.

Learn: Users authenticate with email/password and receive a signed JWT
bearer token carrying their id and role. Every protected request goes
through the guard in auth.dependencies, which verifies the token via the
Authenticator and compares the role against the route's requirement.
"""
