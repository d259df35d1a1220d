"""
Auth Manager

Registration of players and publishers, credential verification and
signed access token issuance.
"""
