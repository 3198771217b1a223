"""BookFlow: appointment booking backend"""
