"""HTTP API for the EcoPulse news desk"""
