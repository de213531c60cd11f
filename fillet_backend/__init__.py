# HTTP service for brute_fillet
