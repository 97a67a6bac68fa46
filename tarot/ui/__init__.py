"""塔罗三卡回合引擎的用户界面"""
