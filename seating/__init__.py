"""Restaurant seat allocation service"""
