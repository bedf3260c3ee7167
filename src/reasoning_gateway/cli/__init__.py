"""reasoning-gateway command line interface"""
