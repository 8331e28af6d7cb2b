"""PyQt6 の画面（メインウィンドウ・設定ダイアログ・テーマ）。"""
