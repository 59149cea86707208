"""
FinTerm - command-driven market data terminal
"""
