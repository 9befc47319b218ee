from .brute_force import BruteForceTSPSolver
