from policylab.config_model.model import load_config
cfg = load_config()  # reads config/config.toml by default
print("Project:", cfg.env.project_name)
print("Batch input:", cfg.batch.input_dir)
print("Batch output:", cfg.batch.output_dir)
print("API port:", cfg.api.port)
print("Log level:", cfg.logging.level)
