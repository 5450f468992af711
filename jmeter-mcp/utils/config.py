import yaml
import os
import platform

# Directory holding jmeter.py, services/ and utils/ (one level up from this file).
SERVER_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def load_config():
    """
    Load the server configuration.

    Resolution order:
      1. JMETER_MCP_CONFIG environment variable (explicit file path)
      2. platform-specific config (config.mac.yaml / config.windows.yaml)
      3. config.yaml
    """
    explicit = os.environ.get('JMETER_MCP_CONFIG')
    if explicit:
        if not os.path.exists(explicit):
            raise FileNotFoundError(f"Configuration file named by JMETER_MCP_CONFIG not found: {explicit}")
        return _read_yaml(explicit)

    # Platform-specific config mapping
    config_map = {
        'Darwin': 'config.mac.yaml',
        'Windows': 'config.windows.yaml'
    }

    system = platform.system()
    platform_config = config_map.get(system)

    # Use platform-specific config if it exists, otherwise fall back to config.yaml
    candidate_files = [platform_config, 'config.yaml'] if platform_config else ['config.yaml']

    for filename in candidate_files:
        config_path = os.path.join(SERVER_ROOT, filename)
        if os.path.exists(config_path):
            return _read_yaml(config_path)

    raise FileNotFoundError("No valid configuration file found (checked platform-specific and default).")


def _read_yaml(config_path):
    with open(config_path, 'r') as file:
        try:
            return yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise Exception(f"Error parsing '{os.path.basename(config_path)}': {e}")


def resolve_path(path_value, default):
    """Resolve a configured directory; relative paths are anchored at the server root."""
    path_value = path_value or default
    if os.path.isabs(path_value):
        return path_value
    return os.path.abspath(os.path.join(SERVER_ROOT, path_value))


def get_jmx_dir(config):
    return resolve_path(config.get('jmeter', {}).get('jmx_dir'), 'jmx')


def get_reports_dir(config):
    return resolve_path(config.get('jmeter', {}).get('reports_dir'), 'reports')


if __name__ == '__main__':
    # For testing purposes, print the configuration.
    config = load_config()
    print("Loaded general configuration:")
    print(config)
