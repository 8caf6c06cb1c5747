"""HideLoginNotice: hide friend login/logout notices in the game chat"""

# no public members
__all__ = ()
