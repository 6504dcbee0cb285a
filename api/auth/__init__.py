"""
Accounts, sessions and OTP flows.
"""
