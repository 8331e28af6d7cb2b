"""
Field Take Log. 現場でテイク（S#/C#/T#・OK/NG/KEEP・CH1〜CH8・備考）を記録する。
"""
__version__ = "0.1.0"
