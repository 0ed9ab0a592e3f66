"""Route modules shared by the sample applications"""
